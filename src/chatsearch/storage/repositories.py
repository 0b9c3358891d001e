"""Contact directory and conversation store backed by a SQLAlchemy session.

Both read through the session they are given, so a search that builds them
from one `read_scope` session sees a single consistent snapshot. Rows that
cannot be turned into records raise MalformedRecordError one at a time; the
cursor stays usable and moves on to the next row.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, Generic, Iterable, Iterator, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from chatsearch.exceptions import CollaboratorUnavailableError, MalformedRecordError
from chatsearch.search.base_search import (
    ContactRecord,
    ConversationKind,
    ConversationRecord,
    IndexableMessage,
)

from .models import Contact, Conversation, Message

RowT = TypeVar("RowT")
RecordT = TypeVar("RecordT")


class RecordCursor(Generic[RowT, RecordT]):
    """Iterator converting rows to records lazily, one row per step."""

    def __init__(self, rows: Iterable[RowT], convert: Callable[[RowT], RecordT]) -> None:
        self._rows = iter(rows)
        self._convert = convert

    def __iter__(self) -> "RecordCursor[RowT, RecordT]":
        return self

    def __next__(self) -> RecordT:
        row = next(self._rows)
        return self._convert(row)


class SqlContactDirectory:
    """Contacts ordered alphabetically by display name."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self._names: Optional[Dict[str, str]] = None

    def _to_record(self, row: Contact) -> ContactRecord:
        if not row.identifier or not row.identifier.strip():
            raise MalformedRecordError(f"contact #{row.id} has no identifier")
        return ContactRecord(identifier=row.identifier, display_name=row.display_name or "")

    def enumerate_contacts(self) -> RecordCursor[Contact, ContactRecord]:
        stmt = select(Contact).order_by(Contact.display_name, Contact.identifier)
        try:
            rows = self.session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            raise CollaboratorUnavailableError(f"Cannot read contacts: {exc}") from exc
        return RecordCursor(rows, self._to_record)

    def display_name(self, identifier: str) -> str:
        """Display name for `identifier`, or "" when the contact is unknown."""
        if self._names is None:
            try:
                rows = self.session.execute(select(Contact.identifier, Contact.display_name))
                self._names = {ident: name or "" for ident, name in rows}
            except SQLAlchemyError as exc:
                raise CollaboratorUnavailableError(f"Cannot read contacts: {exc}") from exc
        return self._names.get(identifier, "")


class SqlConversationStore:
    """Conversations ordered most recently active first.

    Direct conversations take the contact's display name, falling back to the
    raw identifier. Untitled groups are named after their members.
    """

    def __init__(self, session: Session, contact_directory: SqlContactDirectory) -> None:
        self.session = session
        self.contact_directory = contact_directory

    def _to_record(self, row: Conversation) -> ConversationRecord:
        try:
            kind = ConversationKind(row.kind)
        except ValueError:
            raise MalformedRecordError(
                f"conversation #{row.id} has unknown kind {row.kind!r}"
            ) from None
        members = tuple(m.identifier for m in row.members)
        if kind is ConversationKind.DIRECT:
            if len(members) != 1:
                raise MalformedRecordError(
                    f"direct conversation #{row.id} has {len(members)} participants"
                )
            name = self.contact_directory.display_name(members[0]) or members[0]
        else:
            name = row.title or ", ".join(
                self.contact_directory.display_name(m) or m for m in members
            )
        return ConversationRecord(
            identifier=str(row.id),
            kind=kind,
            display_name=name,
            participant_identifiers=members,
        )

    def enumerate_conversations(self) -> RecordCursor[Conversation, ConversationRecord]:
        stmt = (
            select(Conversation)
            .options(selectinload(Conversation.members))
            .order_by(Conversation.last_activity_at.desc(), Conversation.id)
        )
        try:
            rows = self.session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            raise CollaboratorUnavailableError(f"Cannot read conversations: {exc}") from exc
        return RecordCursor(rows, self._to_record)


def _naive_utc(value: datetime) -> datetime:
    # The index stores naive timestamps; aware values are converted to UTC first
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def iter_messages(session: Session, *, batch_size: int = 500) -> Iterator[IndexableMessage]:
    """Yield every stored message as index input, oldest first."""
    stmt = select(Message).order_by(Message.id).execution_options(yield_per=batch_size)
    try:
        for row in session.scalars(stmt):
            yield IndexableMessage(
                message_id=str(row.id),
                conversation_id=str(row.conversation_id),
                body=row.body or "",
                sent_at=_naive_utc(row.sent_at),
            )
    except SQLAlchemyError as exc:
        raise CollaboratorUnavailableError(f"Cannot read messages: {exc}") from exc
