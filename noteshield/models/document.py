"""
Encrypted document domain models.
"""

from enum import Enum


class DocumentState(Enum):
    """Lifecycle state of an encrypted document."""

    NEW = "new"  # no ciphertext yet
    LOCKED = "locked"  # ciphertext present, plaintext not held
    UNLOCKED = "unlocked"  # plaintext held and editable


class DocumentAction(Enum):
    """User actions a document host may offer."""

    CHOOSE_RECIPIENT = "choose_recipient"
    UNLOCK = "unlock"
    EDIT = "edit"
    LOCK = "lock"
    COPY_CIPHERTEXT = "copy_ciphertext"


_ACTIONS: dict[DocumentState, frozenset[DocumentAction]] = {
    DocumentState.NEW: frozenset({DocumentAction.CHOOSE_RECIPIENT}),
    DocumentState.LOCKED: frozenset({DocumentAction.UNLOCK, DocumentAction.COPY_CIPHERTEXT}),
    DocumentState.UNLOCKED: frozenset(
        {DocumentAction.EDIT, DocumentAction.LOCK, DocumentAction.COPY_CIPHERTEXT}
    ),
}


def available_actions(state: DocumentState) -> frozenset[DocumentAction]:
    """Actions allowed in the given state."""
    return _ACTIONS[state]
