"""
SQL Backend - SQLModel Descriptor Storage

🗃️ SQL Database Backend:
This module provides the transactional storage backend on top of SQLModel and
SQLAlchemy. Any SQLAlchemy URL works; SQLite is the default.

Layout:
- ``shell_descriptor``: one row per shell, descriptor fields in a JSON document
- ``submodel_descriptor``: one row per submodel, standalone (``shell_id`` NULL)
  or owned by a shell and ordered by ``position``

The flat submodel index is the whole ``submodel_descriptor`` table and a shell's
nested list is the set of rows it owns, so both views always agree.

An engine on a ``StaticPool`` (in-memory SQLite) has a single connection for
all sessions. Such a backend serializes its sessions with a lock that a
transaction holds from begin until commit or rollback.
"""

import logging
import threading
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import Column, JSON, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Relationship, Session, SQLModel, create_engine, select

from .interface import TransactionContext
from .base import BaseBackend, PersistenceError, TransactionError
from ...model.descriptors import AssetAdministrationShellDescriptor, SubmodelDescriptor

logger = logging.getLogger(__name__)


# Tables
class ShellRecord(SQLModel, table=True):
    """Persisted shell descriptor"""
    __tablename__ = "shell_descriptor"

    id: str = Field(primary_key=True)
    has_submodel_list: bool = Field(default=False)
    document: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    submodels: List["SubmodelRecord"] = Relationship(
        back_populates="shell",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "SubmodelRecord.position",
            "lazy": "selectin",
        },
    )


class SubmodelRecord(SQLModel, table=True):
    """Persisted submodel descriptor, standalone or owned by a shell"""
    __tablename__ = "submodel_descriptor"

    id: str = Field(primary_key=True)
    shell_id: Optional[str] = Field(default=None, foreign_key="shell_descriptor.id", index=True)
    position: int = Field(default=0)
    document: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    shell: Optional[ShellRecord] = Relationship(back_populates="submodels")


@dataclass
class SQLConnectionConfig:
    """SQL database connection configuration"""
    database_url: str = "sqlite:///aasregistry.db"
    echo: bool = False
    connect_args: Dict[str, Any] = field(default_factory=dict)
    engine_options: Dict[str, Any] = field(default_factory=dict)


class SQLTransactionContext(TransactionContext):
    """SQL-specific transaction context"""

    def __init__(self, transaction_id: str, session: Session):
        super().__init__(transaction_id)
        self.session = session


# Record mapping
def _submodel_document(descriptor: SubmodelDescriptor) -> Dict[str, Any]:
    return descriptor.model_dump(mode="json", exclude={"id"})


def _shell_document(descriptor: AssetAdministrationShellDescriptor) -> Dict[str, Any]:
    return descriptor.model_dump(mode="json", exclude={"id", "submodel_descriptors"})


def _to_submodel(record: SubmodelRecord) -> SubmodelDescriptor:
    return SubmodelDescriptor.model_validate({**record.document, "id": record.id})


def _to_shell(record: ShellRecord) -> AssetAdministrationShellDescriptor:
    submodels = None
    if record.has_submodel_list:
        submodels = [_to_submodel(row) for row in record.submodels]
    return AssetAdministrationShellDescriptor.model_validate(
        {**record.document, "id": record.id, "submodel_descriptors": submodels}
    )


class SQLBackend(BaseBackend):
    """
    SQL storage backend using SQLModel.

    Each public operation runs in its own session transaction unless a
    transaction context is passed in, in which case it joins that session.
    Database errors are logged and re-raised as ``PersistenceError``.

    On a single shared connection only one transaction can be open at a time;
    other threads wait for it, and operations of the owning thread without a
    context join it.
    """

    def __init__(self, config: Optional[SQLConnectionConfig] = None):
        self.connection_config = config or SQLConnectionConfig()
        super().__init__()

        self.engine = create_engine(
            self.connection_config.database_url,
            echo=self.connection_config.echo,
            connect_args=self.connection_config.connect_args,
            **self.connection_config.engine_options,
        )
        self.session_factory = sessionmaker(bind=self.engine, class_=Session, expire_on_commit=False)
        self.active_transactions: Dict[str, SQLTransactionContext] = {}

        self._shared_connection = isinstance(self.engine.pool, StaticPool)
        self._lock = threading.RLock()
        self._open_transaction: Optional[SQLTransactionContext] = None

    # Schema management
    def create_schema(self):
        """Create the descriptor tables if they do not exist"""
        try:
            SQLModel.metadata.create_all(
                self.engine, tables=[ShellRecord.__table__, SubmodelRecord.__table__]
            )
            logger.info("Descriptor tables created")
        except SQLAlchemyError as e:
            logger.error(f"Error initializing schema: {e}")
            raise PersistenceError(f"Schema creation failed: {e}") from e

    def dispose(self):
        """Roll back open transactions and release the engine"""
        for context in list(self.active_transactions.values()):
            self.rollback_transaction(context)
        self.engine.dispose()
        logger.info("SQL backend closed")

    # Session handling
    @contextmanager
    def _session_scope(self, context: Optional[TransactionContext]) -> Iterator[Session]:
        if context is not None:
            self._validate_transaction_context(context)
            if not isinstance(context, SQLTransactionContext):
                raise TransactionError(f"Not a SQL transaction: {context.transaction_id}")
            yield context.session
            return

        with self._connection_guard():
            if self._open_transaction is not None:
                # Only the thread holding the lock gets here
                yield self._open_transaction.session
                return

            session = self.session_factory()
            try:
                with session.begin():
                    yield session
            finally:
                session.close()

    def _connection_guard(self):
        return self._lock if self._shared_connection else nullcontext()

    @contextmanager
    def _operation(self, name: str, context: Optional[TransactionContext]) -> Iterator[Session]:
        with self._tracked():
            try:
                with self._session_scope(context) as session:
                    yield session
            except SQLAlchemyError as e:
                logger.error(f"Error in {name}: {e}")
                raise PersistenceError(f"{name} failed: {e}") from e

    # Shells
    def list_shells(self, context: Optional[TransactionContext] = None) -> List[AssetAdministrationShellDescriptor]:
        with self._operation("list_shells", context) as session:
            return [_to_shell(record) for record in session.exec(select(ShellRecord)).all()]

    def get_shell(self, shell_id: str,
                  context: Optional[TransactionContext] = None) -> Optional[AssetAdministrationShellDescriptor]:
        if not self._is_valid_key(shell_id):
            return None
        with self._operation("get_shell", context) as session:
            record = session.get(ShellRecord, shell_id)
            return _to_shell(record) if record is not None else None

    def put_shell(self, descriptor: AssetAdministrationShellDescriptor,
                  context: Optional[TransactionContext] = None) -> AssetAdministrationShellDescriptor:
        self._require_descriptor_id(descriptor)
        with self._operation("put_shell", context) as session:
            existing = session.get(ShellRecord, descriptor.id)
            if existing is not None:
                session.delete(existing)
                session.flush()

            record = ShellRecord(
                id=descriptor.id,
                has_submodel_list=descriptor.submodel_descriptors is not None,
                document=_shell_document(descriptor),
            )
            session.add(record)
            for position, submodel in enumerate(descriptor.submodel_descriptors or []):
                self._require_descriptor_id(submodel)
                # Rows already in the flat index are adopted by the shell
                row = session.get(SubmodelRecord, submodel.id)
                if row is None:
                    row = SubmodelRecord(id=submodel.id)
                row.document = _submodel_document(submodel)
                row.position = position
                record.submodels.append(row)
            session.flush()
            logger.debug(f"Stored shell {descriptor.id}")
            return _to_shell(record)

    def remove_shell(self, shell_id: str, context: Optional[TransactionContext] = None) -> bool:
        if not self._is_valid_key(shell_id):
            return False
        with self._operation("remove_shell", context) as session:
            record = session.get(ShellRecord, shell_id)
            if record is None:
                return False
            session.delete(record)
            session.flush()
            logger.debug(f"Removed shell {shell_id}")
            return True

    # Flat submodel index
    def list_submodels(self, context: Optional[TransactionContext] = None) -> List[SubmodelDescriptor]:
        with self._operation("list_submodels", context) as session:
            return [_to_submodel(row) for row in session.exec(select(SubmodelRecord)).all()]

    def get_submodel(self, submodel_id: str,
                     context: Optional[TransactionContext] = None) -> Optional[SubmodelDescriptor]:
        if not self._is_valid_key(submodel_id):
            return None
        with self._operation("get_submodel", context) as session:
            row = session.get(SubmodelRecord, submodel_id)
            return _to_submodel(row) if row is not None else None

    def put_submodel(self, descriptor: SubmodelDescriptor,
                     context: Optional[TransactionContext] = None) -> SubmodelDescriptor:
        self._require_descriptor_id(descriptor)
        with self._operation("put_submodel", context) as session:
            row = session.get(SubmodelRecord, descriptor.id)
            if row is None:
                row = SubmodelRecord(id=descriptor.id)
                session.add(row)
            # An owned row keeps its owner and position
            row.document = _submodel_document(descriptor)
            session.flush()
            return _to_submodel(row)

    def remove_submodel(self, submodel_id: str, context: Optional[TransactionContext] = None) -> bool:
        if not self._is_valid_key(submodel_id):
            return False
        with self._operation("remove_submodel", context) as session:
            row = session.get(SubmodelRecord, submodel_id)
            if row is None:
                return False
            if row.shell is not None:
                # delete-orphan removes the row and keeps the loaded collection in sync
                row.shell.submodels.remove(row)
            else:
                session.delete(row)
            session.flush()
            return True

    # Transaction support
    def begin_transaction(self) -> SQLTransactionContext:
        """Begin a new SQL transaction; on a shared connection the lock is held until commit or rollback"""
        if self._shared_connection:
            self._lock.acquire()
            if self._open_transaction is not None:
                self._lock.release()
                raise TransactionError(
                    f"Transaction already open on the shared connection: {self._open_transaction.transaction_id}"
                )

        session = self.session_factory()
        try:
            session.begin()
        except SQLAlchemyError as e:
            session.close()
            if self._shared_connection:
                self._lock.release()
            logger.error(f"Error beginning transaction: {e}")
            raise PersistenceError(f"Could not begin transaction: {e}") from e

        context = SQLTransactionContext(self._generate_id(), session)
        context.is_active = True
        context.started_at = self._record_operation_start()
        self.active_transactions[context.transaction_id] = context
        if self._shared_connection:
            self._open_transaction = context
        return context

    def _end_transaction(self, context: SQLTransactionContext):
        context.session.close()
        self.active_transactions.pop(context.transaction_id, None)
        if context is self._open_transaction:
            self._open_transaction = None
            self._lock.release()

    def commit_transaction(self, context: TransactionContext):
        """Commit a SQL transaction"""
        if not isinstance(context, SQLTransactionContext) or not context.is_active:
            raise TransactionError(f"Transaction is not active: {context.transaction_id}")

        try:
            context.session.commit()
            self._mark_committed(context)
        except SQLAlchemyError as e:
            context.session.rollback()
            self._mark_rolled_back(context)
            logger.error(f"Error committing transaction {context.transaction_id}: {e}")
            raise PersistenceError(f"Commit failed: {e}") from e
        finally:
            self._end_transaction(context)

    def rollback_transaction(self, context: TransactionContext):
        """Rollback a SQL transaction"""
        if not isinstance(context, SQLTransactionContext) or not context.is_active:
            return  # Already rolled back or committed

        try:
            context.session.rollback()
            self._mark_rolled_back(context)
        except SQLAlchemyError as e:
            logger.error(f"Error rolling back transaction {context.transaction_id}: {e}")
            raise PersistenceError(f"Rollback failed: {e}") from e
        finally:
            self._end_transaction(context)

    def get_metrics(self) -> Dict[str, Any]:
        """Get SQL backend performance metrics"""
        try:
            with self._session_scope(None) as session:
                self.metrics.shells_count = session.exec(select(func.count()).select_from(ShellRecord)).one()
                self.metrics.submodels_count = session.exec(
                    select(func.count()).select_from(SubmodelRecord)
                ).one()
        except SQLAlchemyError as e:
            logger.warning(f"Could not count stored descriptors: {e}")

        metrics = super().get_metrics()
        metrics["active_transactions"] = len(self.active_transactions)
        url = self.connection_config.database_url
        metrics["database_url"] = url.split("@")[-1] if "@" in url else url
        return metrics


# Helper functions
def create_sqlite_backend(database_path: str = ":memory:", echo: bool = False) -> SQLBackend:
    """
    Create a SQLite backend with its schema in place.

    ``":memory:"`` gives a private in-memory database shared by all sessions
    of the returned backend.
    """
    if database_path == ":memory:":
        config = SQLConnectionConfig(
            database_url="sqlite://",
            echo=echo,
            connect_args={"check_same_thread": False},
            engine_options={"poolclass": StaticPool},
        )
    else:
        config = SQLConnectionConfig(database_url=f"sqlite:///{database_path}", echo=echo)
    backend = SQLBackend(config)
    backend.create_schema()
    return backend


__all__ = [
    "SQLBackend", "SQLConnectionConfig", "SQLTransactionContext",
    "ShellRecord", "SubmodelRecord", "create_sqlite_backend",
]
