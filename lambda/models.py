from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from errors import GitHubDecodeError

MARKDOWN_SUFFIX = ".md"


class RemoteEntry(BaseModel):
    """One item of a GitHub content listing."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    path: str
    type: str
    url: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


class LabItem(BaseModel):
    """A lab file (leaf) or a folder holding lab files, one level deep."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    path: Optional[str] = None
    is_folder: bool = Field(default=False, alias="isFolder")
    sub_items: Optional[List["LabItem"]] = Field(default=None, alias="subItems")

    @model_validator(mode="after")
    def check_variant(self):
        if self.is_folder:
            if self.path is not None or not self.sub_items:
                raise ValueError("a folder has sub items and no path")
            if any(item.is_folder for item in self.sub_items):
                raise ValueError("folders cannot be nested")
        elif self.path is None or self.sub_items is not None:
            raise ValueError("a file has a path and no sub items")
        return self

    @classmethod
    def leaf(cls, entry: RemoteEntry) -> "LabItem":
        return cls(name=strip_markdown_suffix(entry.name), path=entry.path)

    @classmethod
    def folder(cls, entry: RemoteEntry, children: List["LabItem"]) -> "LabItem":
        return cls(name=f"**{entry.name}**", is_folder=True, sub_items=list(children))


_entries_adapter = TypeAdapter(List[RemoteEntry])
_items_adapter = TypeAdapter(List[LabItem])


def strip_markdown_suffix(name: str) -> str:
    if name.endswith(MARKDOWN_SUFFIX):
        return name[: -len(MARKDOWN_SUFFIX)]
    return name


def is_lab_file(entry: RemoteEntry) -> bool:
    return entry.type == "file" and entry.name.endswith(MARKDOWN_SUFFIX)


def parse_entries(body) -> List[RemoteEntry]:
    """Decode a content listing body into entries.

    GitHub answers with an object instead of an array when the path points at
    a file, which is treated as a malformed listing.
    """
    try:
        return _entries_adapter.validate_json(body)
    except ValidationError as e:
        raise GitHubDecodeError(f"Failed to process GitHub response: {e.error_count()} error(s)") from e


def dump_lab_items(items: List[LabItem]) -> str:
    return _items_adapter.dump_json(items, by_alias=True).decode("utf-8")
