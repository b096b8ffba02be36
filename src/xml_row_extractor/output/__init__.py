"""Row to XML fragment output."""

from .outputter import XmlOutputter

__all__ = ["XmlOutputter"]
