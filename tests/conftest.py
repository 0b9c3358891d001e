from datetime import datetime, timedelta
from typing import Dict, Iterator, List, Optional

import pytest
from sqlalchemy.orm import Session, sessionmaker

from chatsearch.config import SearchConfig, Settings
from chatsearch.search.message_index import WhooshMessageIndex
from chatsearch.service import SearchService
from chatsearch.storage.database import get_engine, init_db, make_session_factory, session_scope
from chatsearch.storage.models import Contact, Conversation, ConversationMember, Message

ALICE = "+12345678900"
BOB = "+49030183000"

T0 = datetime(2018, 6, 1, 12, 0, 0)


# ---------- Helpers ----------


def add_conversation(
    session: Session, kind: str, title: Optional[str], members: List[str], minutes: int
) -> Conversation:
    conversation = Conversation(
        kind=kind,
        title=title,
        last_activity_at=T0 + timedelta(minutes=minutes),
        members=[ConversationMember(identifier=m) for m in members],
    )
    session.add(conversation)
    session.flush()
    return conversation


def add_message(session: Session, conversation_id: int, body: str, minutes: int) -> None:
    session.add(
        Message(
            conversation_id=conversation_id,
            body=body,
            sent_at=T0 + timedelta(minutes=minutes),
        )
    )


# ---------- Fixtures ----------


@pytest.fixture()
def session_factory() -> Iterator[sessionmaker[Session]]:
    engine = get_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def conversation_ids(session_factory: sessionmaker[Session]) -> Dict[str, str]:
    """Contacts Alice and Bob, two groups and two direct conversations.

    Enumeration order (most recent first): Book Club, Snack Club, Alice, Bob.
    """
    with session_scope(session_factory) as session:
        session.add_all(
            [
                Contact(identifier=ALICE, display_name="Alice"),
                Contact(identifier=BOB, display_name="Bob Barker"),
            ]
        )
        book = add_conversation(session, "group", "Book Club", [ALICE, BOB], 40)
        snack = add_conversation(session, "group", "Snack Club", [ALICE], 30)
        alice = add_conversation(session, "direct", None, [ALICE], 20)
        bob = add_conversation(session, "direct", None, [BOB], 10)
        ids = {
            "book": str(book.id),
            "snack": str(snack.id),
            "alice": str(alice.id),
            "bob": str(bob.id),
        }
    return ids


@pytest.fixture()
def with_messages(
    session_factory: sessionmaker[Session], conversation_ids: Dict[str, str]
) -> Dict[str, str]:
    with session_scope(session_factory) as session:
        add_message(session, int(conversation_ids["alice"]), "Hello Alice", 1)
        add_message(session, int(conversation_ids["alice"]), "Goodbye Alice", 2)
        add_message(session, int(conversation_ids["book"]), "Hello Book Club", 3)
        add_message(session, int(conversation_ids["book"]), "Goodbye Book Club", 4)
    return conversation_ids


@pytest.fixture()
def settings() -> Settings:
    return Settings(search=SearchConfig())


@pytest.fixture()
def service(settings: Settings, session_factory: sessionmaker[Session]) -> SearchService:
    return SearchService(settings, session_factory, WhooshMessageIndex())
