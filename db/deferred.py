from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

_UNSET = object()


class Deferred(Generic[T]):
    """
    A value that is computed only when the caller forces it.

    Creating a Deferred runs nothing. Without caching every call to force()
    runs the loader again; with cache=True the first result is kept until
    reset() is called.
    """

    def __init__(self, loader: Callable[[], T], cache: bool = False, description: Optional[str] = None) -> None:
        self._loader = loader
        self.cache = cache
        self.description = description or getattr(loader, "__name__", "deferred value")
        self._value = _UNSET

    @property
    def is_cached(self) -> bool:
        return self._value is not _UNSET

    def force(self) -> T:
        if self.is_cached:
            return self._value
        value = self._loader()
        if self.cache:
            self._value = value
        return value

    def reset(self) -> None:
        self._value = _UNSET

    def __repr__(self):
        state = "cached" if self.is_cached else "pending"
        return f"<Deferred({self.description}, {state})>"
