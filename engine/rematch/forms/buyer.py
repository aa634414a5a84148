"""New-buyer form — collects a name and optional Slack channel, creates the buyer.

The form is a small state machine (``idle`` / ``submitting``) with its
surroundings injected: a session factory (``None`` when the database is not
configured), a ``navigate`` callback that opens a buyer's detail view, and an
``alert`` callback that shows a blocking error to the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import ConfigurationError, RematchError
from ..models.buyer import Buyer
from ..services.buyers import insert_buyer

logger = logging.getLogger(__name__)

Navigate = Callable[[str], None]
Alert = Callable[[str], None]


def buyer_detail_path(buyer_id: str) -> str:
    return f"/buyers/{buyer_id}"


class FormState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


@dataclass
class NewBuyerForm:
    session_factory: Optional[Callable[[], Session]]
    navigate: Navigate
    alert: Alert
    name: str = ""
    slack_channel: str = ""
    state: FormState = FormState.IDLE

    @property
    def submitting(self) -> bool:
        return self.state is FormState.SUBMITTING

    @property
    def can_submit(self) -> bool:
        """The submit control is enabled only when idle and a name was typed."""
        return not self.submitting and bool(self.name)

    def submit(self) -> Optional[Buyer]:
        """Create the buyer and navigate to it; alert and stay on the form on failure."""
        if not self.can_submit:
            return None

        self.state = FormState.SUBMITTING
        try:
            if self.session_factory is None:
                raise ConfigurationError("Database not configured")
            with self.session_factory() as db:
                buyer = insert_buyer(db, self.name, self.slack_channel or None)
            self.navigate(buyer.id)
            return buyer
        except (RematchError, SQLAlchemyError) as e:
            logger.error("Failed to create buyer: %s", e)
            self.alert(f"Failed to create buyer: {getattr(e, 'message', None) or e}")
            return None
        finally:
            self.state = FormState.IDLE
