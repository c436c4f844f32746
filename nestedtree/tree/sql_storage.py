"""
SQLAlchemy Tree Storage for nestedtree
Keeps nested-set intervals in any database SQLAlchemy can talk to
"""

import logging
from contextlib import contextmanager
from typing import Any, List, Optional, Type

from sqlalchemy import BigInteger, Column, and_, create_engine, event, func, inspect, select, update
from sqlalchemy.orm import Session, aliased, sessionmaker

from nestedtree.core.config import StoreConfig
from nestedtree.tree.storage import RangePredicate, TreeStore


class NestedSetMixin:
    """
    Declarative mixin adding the interval columns to a mapped class

    The columns are named lft/rgt because LEFT and RIGHT are reserved words
    in most SQL dialects.
    """
    left = Column("lft", BigInteger, nullable=False, index=True, default=0)
    right = Column("rgt", BigInteger, nullable=False, index=True, default=0)


class SqlAlchemyTreeStore(TreeStore):
    """
    Tree store backed by an ORM Session

    Durable rows are renumbered with ORM-enabled bulk UPDATE statements.
    Objects that were added to the session but not flushed yet are renumbered
    in Python, so both tiers always agree.
    """

    def __init__(self, session: Session, model: Type[Any]):
        """
        Initialize SQLAlchemy tree storage

        Args:
            session: Session the tree lives in
            model: Mapped class carrying left/right attributes (see NestedSetMixin)
        """
        self.session = session
        self.model = model
        mapper = inspect(model)
        self._right_column = mapper.columns["right"]

        logging.info(f"SqlAlchemyTreeStore initialized for {model.__name__}")

    def _attribute(self, field: str):
        return getattr(self.model, field)

    def _clause(self, predicate: RangePredicate):
        attribute = self._attribute(predicate.field)
        clauses = []
        if predicate.start is not None:
            clauses.append(attribute >= predicate.start)
        if predicate.end is not None:
            clauses.append(attribute < predicate.end)
        return and_(*clauses)

    def _pending(self) -> List[Any]:
        return [obj for obj in self.session.new if isinstance(obj, self.model)]

    def all_nodes(self) -> List[Any]:
        with self.session.no_autoflush:
            durable = list(self.session.scalars(select(self.model)))
        return durable + self._pending()

    def range_query(self, *predicates: RangePredicate) -> List[Any]:
        stmt = select(self.model)
        for predicate in predicates:
            stmt = stmt.where(self._clause(predicate))
        with self.session.no_autoflush:
            durable = list(self.session.scalars(stmt))
        staged = [n for n in self._pending() if all(p.matches(n) for p in predicates)]
        return sorted(durable + staged, key=lambda n: n.left)

    def bulk_update(self, predicate: RangePredicate, delta: int) -> int:
        attribute = self._attribute(predicate.field)
        stmt = (
            update(self.model)
            .where(self._clause(predicate))
            .values({attribute: attribute + delta})
            .execution_options(synchronize_session="evaluate")
        )
        with self.session.no_autoflush:
            staged = [n for n in self._pending() if predicate.matches(n)]
            result = self.session.execute(stmt)
        for node in staged:
            setattr(node, predicate.field, getattr(node, predicate.field) + delta)

        logging.debug(
            f"Shifted {result.rowcount} rows and {len(staged)} staged nodes "
            f"where {predicate.describe()} by {delta}"
        )
        return result.rowcount + len(staged)

    def add(self, node: Any) -> None:
        self.session.add(node)

    def is_attached(self, node: Any) -> bool:
        state = inspect(node, raiseerr=False)
        if state is None:
            return False
        return (state.pending or state.persistent) and state.session is self.session

    def _aggregate(self, function, attribute, pick) -> int:
        with self.session.no_autoflush:
            durable = self.session.scalar(select(function(attribute)))
        values = [getattr(n, attribute.key) for n in self._pending()]
        if durable is not None:
            values.append(durable)
        return pick(values, default=0)

    def min_left(self) -> int:
        return self._aggregate(func.min, self.model.left, min)

    def max_right(self) -> int:
        return self._aggregate(func.max, self.model.right, max)

    def find_by_left(self, left: int) -> Optional[Any]:
        with self.session.no_autoflush:
            node = self.session.scalars(select(self.model).where(self.model.left == left)).first()
        if node is not None:
            return node
        for staged in self._pending():
            if staged.left == left:
                return staged
        return None

    def chain_from(self, left: int, upper: Optional[int] = None) -> List[Any]:
        """
        Walk a sibling chain with one recursive query.

        Staged nodes are invisible to SQL, so while any exist the chain is
        walked with point lookups instead.
        """
        if self._pending():
            return super().chain_from(left, upper)

        anchor = select(self.model).where(self.model.left == left)
        if upper is not None:
            anchor = anchor.where(self.model.right < upper)
        chain = anchor.cte(name="sibling_chain", recursive=True)

        previous = aliased(chain, name="previous")
        following = aliased(self.model, name="following")
        step = select(following).where(following.left == previous.c[self._right_column.key] + 1)
        if upper is not None:
            step = step.where(following.right < upper)
        chain = chain.union_all(step)

        entity = aliased(self.model, chain)
        with self.session.no_autoflush:
            return list(self.session.scalars(select(entity).order_by(entity.left)))

    @contextmanager
    def transaction(self):
        savepoint = self.session.begin_nested()
        try:
            with self.session.no_autoflush:
                yield self
        except Exception:
            savepoint.rollback()
            # Bulk updates write shifted values straight into the identity map
            self.session.expire_all()
            logging.warning("Tree transaction rolled back to savepoint")
            raise
        else:
            savepoint.commit()

    def commit(self) -> None:
        self.session.commit()
        logging.info(f"Committed {self.model.__name__} tree changes")


def _enable_sqlite_savepoints(engine) -> None:
    """
    Let SQLAlchemy emit BEGIN itself so SAVEPOINT works on pysqlite.
    """
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_session_factory(config: StoreConfig) -> sessionmaker:
    """
    Build a sessionmaker from store configuration

    Args:
        config: Store configuration holding the database URL

    Returns:
        sessionmaker bound to a fresh engine
    """
    engine = create_engine(config.database_url, echo=config.echo_sql)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(engine)
    logging.info(f"Created engine for {engine.url.render_as_string(hide_password=True)}")
    return sessionmaker(bind=engine)
