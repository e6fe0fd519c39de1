from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class Database:
    """Owns the engine and session factory for one application instance.

    Nothing here is process-global: the application factory builds one and
    hands it to request dependencies and background jobs. The engine is
    created lazily so constructing a Database never opens a connection or
    imports a driver.
    """

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            if self.url.startswith("sqlite"):
                kwargs = {"connect_args": {"check_same_thread": False}}
                if ":memory:" in self.url or self.url.rstrip("/") == "sqlite:":
                    kwargs["poolclass"] = StaticPool
                self._engine = create_engine(self.url, echo=self.echo, **kwargs)
            else:
                self._engine = create_engine(self.url, echo=self.echo, pool_pre_ping=True)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        return self._session_factory

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self):
        Base.metadata.create_all(bind=self.engine)

    def dispose(self):
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
