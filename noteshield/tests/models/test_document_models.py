from noteshield.models.document import DocumentAction, DocumentState, available_actions


def test_new_document_only_offers_recipient_choice() -> None:
    assert available_actions(DocumentState.NEW) == {DocumentAction.CHOOSE_RECIPIENT}


def test_locked_document_actions() -> None:
    assert available_actions(DocumentState.LOCKED) == {
        DocumentAction.UNLOCK,
        DocumentAction.COPY_CIPHERTEXT,
    }


def test_unlocked_document_actions() -> None:
    assert available_actions(DocumentState.UNLOCKED) == {
        DocumentAction.EDIT,
        DocumentAction.LOCK,
        DocumentAction.COPY_CIPHERTEXT,
    }


def test_every_state_has_actions() -> None:
    for state in DocumentState:
        assert available_actions(state)
