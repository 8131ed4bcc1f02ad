from dataclasses import dataclass


@dataclass(eq=False)
class CacheError(Exception):
    message: str
    key: str | None = None
    group: str | None = None

    def __str__(self) -> str:
        bits = [self.message]
        if self.group:
            bits.append(f"group={self.group}")
        if self.key is not None:
            bits.append(f"key={self.key!r}")
        return " ".join(bits)


class GroupConfigError(CacheError):
    """A group was declared without a name or without a loader."""


class LoaderError(CacheError):
    """The loader failed to produce a value. Nothing was cached."""


class SourceNotFound(LoaderError):
    pass


@dataclass(eq=False)
class SourceUnavailable(LoaderError):
    status_code: int | None = None

    def __str__(self) -> str:
        text = super().__str__()
        if self.status_code is not None:
            text += f" status={self.status_code}"
        return text
