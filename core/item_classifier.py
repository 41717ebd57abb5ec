"""
Item Classifier Module

Maps an Outlook message class (``PR_MESSAGE_CLASS``) to the kind of record
the walker extracts from it.
"""

from enum import Enum
from typing import Optional


class ItemCategory(Enum):
    """Semantic category of a mailbox item"""
    MESSAGE = "message"
    CONTACT = "contact"
    APPOINTMENT = "appointment"
    UNRECOGNIZED = "unrecognized"


IPM_NAMESPACE = "IPM."

# Checked in order; each class also matches its dotted subclasses
_CATEGORY_CLASSES = (
    ("IPM.Note", ItemCategory.MESSAGE),
    ("IPM.Contact", ItemCategory.CONTACT),
    ("IPM.Appointment", ItemCategory.APPOINTMENT),
)


def _matches(message_class: str, family: str) -> bool:
    return message_class == family or message_class.startswith(family + ".")


def classify_item(message_class: Optional[str]) -> ItemCategory:
    """
    Classify a message class string.

    ``"IPM.Note.SMIME"`` is a message, ``"IPM.Contact"`` a contact.
    Anything outside the ``IPM.`` namespace, or inside it but not one of the
    known families (``"IPM.Task"``, ``"IPM.StickyNote"``), is unrecognized.

    Args:
        message_class: The item's type tag, possibly None

    Returns:
        ItemCategory for the tag
    """
    if not message_class or not message_class.startswith(IPM_NAMESPACE):
        return ItemCategory.UNRECOGNIZED

    for family, category in _CATEGORY_CLASSES:
        if _matches(message_class, family):
            return category

    return ItemCategory.UNRECOGNIZED
