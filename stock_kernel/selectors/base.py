"""
Module: stock_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
    Selectors implement the report's ports on top of SQLAlchemy and return
    frozen domain objects, never ORM instances.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from engines or services.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - Session ownership: the caller owns the session and its transaction
      scope.  Separate selectors may read at different moments; nothing here
      promises a consistent view across the ledger and the snapshot.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return domain objects.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        self.session = session
