import re
import unicodedata

from sqlalchemy import exists
from sqlalchemy.orm import Session

from app.models.product import Product

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_APOSTROPHES = re.compile(r"['’]")


def slugify(value: str, separator: str = "-") -> str:
    """
    Convert a display name into a URL-safe token.

    Characters are transliterated to ASCII, lowercased, and every run of
    non-alphanumeric characters becomes a single separator.

        >>> slugify("Red Shoe!!")
        'red-shoe'
        >>> slugify("  Crème Brûlée  ")
        'creme-brulee'
    """
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = _APOSTROPHES.sub("", value.lower())
    return _NON_ALNUM.sub(separator, value).strip(separator)


class SlugAllocator:
    """
    Allocates unique product slugs.

    The existence check and the later insert are not atomic: two requests
    may both see a candidate as free. The unique index on `products.slug`
    rejects the second insert and the caller reports a conflict.
    """

    def __init__(self, db: Session):
        self.db = db

    def exists(self, slug: str) -> bool:
        return self.db.query(exists().where(Product.slug == slug)).scalar()

    def allocate(self, name: str) -> str:
        """
        Return the first unused slug among `base`, `base-1`, `base-2`, ...

        Returns an empty string when the name has no usable characters.
        """
        base = slugify(name)
        if not base:
            return ""

        candidate = base
        count = 1
        while self.exists(candidate):
            candidate = f"{base}-{count}"
            count += 1
        return candidate
