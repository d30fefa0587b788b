"""
Derived image variants and the artifacts produced for them.
"""

import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


ALPHANUMERIC = re.compile(r'[A-Za-z0-9]')

# non-word characters, equivalent to [^a-zA-Z0-9_]
INVALID_FILENAME_CHARACTERS = re.compile(r'[^A-Za-z0-9_]')


class ImageVariant(Enum):
    """Renditions produced for each source image, in generation order."""

    THUMBNAIL = 'thumbnail'
    OVERVIEW = 'overview'
    ORIGINAL = 'original'

    @property
    def qualifier(self) -> str:
        return self.value


@dataclass
class DerivedArtifact:
    """
    A derived image stored alongside its source.

    Attributes:
        qualifier: Variant qualifier ('overview' or 'original')
        data: Encoded image bytes
        mime_type: MIME type of data
        filename: Generated filename
    """
    qualifier: str
    data: bytes
    mime_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.data)


def build_derived_filename(title: Optional[str], qualifier: str, extension: str) -> str:
    """
    Build the filename for a derived image from the source title.

    The title must keep some alphanumeric characters once its extension is
    removed, otherwise the plain qualifier is used.

    >>> build_derived_filename('My Tank $$ Image.tif', 'overview', 'jpg')
    'overview-mytankimage.jpg'
    >>> build_derived_filename('###', 'overview', 'jpg')
    'overview.jpg'
    """
    root = os.path.splitext(os.path.basename(title or ''))[0]

    if ALPHANUMERIC.search(root):
        stripped = INVALID_FILENAME_CHARACTERS.sub('', root)
        return f"{qualifier}-{stripped}.{extension}".lower()

    return f"{qualifier}.{extension}".lower()
