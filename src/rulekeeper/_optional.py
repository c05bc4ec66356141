"""Stand-ins for classes whose optional dependency is not installed."""

from typing import Any


def _create_missing_dependency_class(class_name: str, extra: str) -> type:
    """Build a placeholder for a class that needs an optional extra.

    Importing the placeholder and naming it in annotations works as usual.
    Instantiating it raises ImportError with the pip command for the extra,
    so `LocalStorage(use_vector_index=True)` fails with a useful hint instead
    of a NameError deep inside the package.

    Args:
        class_name: Name of the class being replaced
        extra: rulekeeper-rag extra that provides it (e.g. "chroma")
    """

    def __init__(self: Any, *args: Any, **kwargs: Any) -> None:
        raise ImportError(
            f"{class_name} requires the '{extra}' extra. "
            f"Install it with: pip install rulekeeper-rag[{extra}]"
        )

    def __class_getitem__(cls: type, item: Any) -> type:
        return cls

    return type(
        class_name,
        (),
        {
            "__init__": __init__,
            "__class_getitem__": classmethod(__class_getitem__),
            "__module__": "rulekeeper",
            "__qualname__": class_name,
        },
    )
