from typing import Dict, Iterable, List, Optional
from cvault_files.models.files import StoreEntry, FileNode, FolderListing
from cvault_files.utils.paths import SEPARATOR
import mimetypes

# status shown for every listed file, there is no backing state
ACTIVE_STATUS = "Active"

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(file_name: str) -> str:
    """Guess the mime type from file name.

    Args:
        file_name (str): The file name.

    Returns:
        str: A standard mime type string.
    """
    mime_type, encoding = mimetypes.guess_type(file_name)
    if mime_type is None:
        if file_name.endswith('.webp'):
            mime_type = 'image/webp'
        else:
            mime_type = DEFAULT_MIME_TYPE
    return mime_type


def parent_prefix(key: str) -> str:
    """Get the prefix of the folder containing a key, "" at the top level."""
    stripped = key[:-1] if key.endswith(SEPARATOR) else key
    if SEPARATOR not in stripped:
        return ""
    return stripped.rsplit(SEPARATOR, 1)[0] + SEPARATOR


class FolderListingBuilder:
    """Projects a flat listing of store entries into one level of a folder view.

    Only the immediate children of the prefix are kept: subfolders derived from
    keys ending with the separator, and files directly under the prefix. The
    marker of the listed folder and files nested deeper are skipped.
    """

    def __init__(self, prefix: str = ""):
        self.prefix = prefix
        self.folders: Dict[str, FileNode] = {}
        self.files: List[FileNode] = []

    @classmethod
    def from_prefix(cls, prefix: str = ""):
        """Make a builder for the listing of a folder.

        Args:
            prefix (str): The listed folder prefix, "" for the root.

        Returns:
            FolderListingBuilder: The builder
        """
        return cls(prefix=prefix)

    def add_entries(self, entries: Iterable[StoreEntry]):
        for entry in entries:
            self.add_entry(entry)
        return self

    def add_entry(self, entry: StoreEntry):
        """Classify a store entry as subfolder, file or excluded.

        Args:
            entry (StoreEntry): An entry whose key starts with the prefix

        Raises:
            ValueError: When the entry is not under the listed prefix.
        """
        if not entry.key.startswith(self.prefix):
            raise ValueError(f"Key {entry.key} is not under prefix {self.prefix}")
        relative_key = entry.key[len(self.prefix):]

        if not relative_key:
            # marker of the listed folder itself
            return self
        if relative_key.endswith(SEPARATOR):
            name = relative_key.split(SEPARATOR, 1)[0]
            folder_key = f"{self.prefix}{name}{SEPARATOR}"
            if folder_key not in self.folders:
                self.folders[folder_key] = FileNode(key=folder_key, name=name, is_file=False)
        elif SEPARATOR not in relative_key:
            self.files.append(FileNode(key=entry.key,
                                       name=relative_key,
                                       size=entry.size,
                                       last_modified=entry.last_modified,
                                       is_file=True,
                                       status=ACTIVE_STATUS))
        return self

    def build(self) -> FolderListing:
        """Get the folder listing.

        Returns:
            FolderListing: Subfolders sorted by key, files in listing order
        """
        folders = [self.folders[key] for key in sorted(self.folders)]
        return FolderListing(prefix=self.prefix, folders=folders, files=list(self.files))


def project(entries: Iterable[StoreEntry], prefix: str = "") -> FolderListing:
    """Project the flat listing of a prefix into its immediate subfolders and files."""
    return FolderListingBuilder.from_prefix(prefix).add_entries(entries).build()


class ListingCache:
    """Client side cache of the last listing fetched for each folder.

    Freshly uploaded entries are merged into the cached listing of their folder,
    replacing any file with the same key, until the next full refresh.
    """

    def __init__(self):
        self.listings: Dict[str, FolderListing] = {}

    def get(self, prefix: str) -> Optional[FolderListing]:
        return self.listings.get(prefix)

    def refresh(self, listing: FolderListing) -> FolderListing:
        self.listings[listing.prefix] = listing
        return listing

    def invalidate(self, prefix: Optional[str] = None):
        if prefix is None:
            self.listings.clear()
        else:
            self.listings.pop(prefix, None)

    def merge(self, entry: StoreEntry) -> Optional[FolderListing]:
        """Merge a single entry into the cached listing of its parent folder.

        Args:
            entry (StoreEntry): The uploaded file or created folder marker.

        Returns:
            FolderListing: The updated listing, None when the folder is not cached.
        """
        prefix = parent_prefix(entry.key)
        listing = self.listings.get(prefix)
        if listing is None:
            return None
        projected = project([entry], prefix)

        files = list(listing.files)
        for node in projected.files:
            index = next((i for i, f in enumerate(files) if f.key == node.key), None)
            if index is None:
                files.append(node)
            else:
                files[index] = node

        folders = {folder.key: folder for folder in listing.folders}
        for node in projected.folders:
            folders.setdefault(node.key, node)

        merged = FolderListing(prefix=prefix,
                               folders=[folders[key] for key in sorted(folders)],
                               files=files)
        self.listings[prefix] = merged
        return merged
