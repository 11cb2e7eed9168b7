from __future__ import annotations

import logging
from typing import Optional

from config.settings import Settings
from kairos.completion import CompletionClient
from kairos.errors import CompletionAPIError, StorageError
from kairos.models import DashboardState, LearnRequest
from kairos.prompt import (
    API_ERROR_TEMPLATE,
    EMPTY_QUESTION_MESSAGE,
    FALLBACK_ANSWER,
    OPENAI_CONFIG_ERROR,
    SUPABASE_CONFIG_ERROR,
    UNREACHABLE_MESSAGE,
)
from kairos.storage import SupabaseStore


logger = logging.getLogger("kairos.dashboard")


class KairosDashboard:
    """State and handlers behind the Kairos learning dashboard.

    ``completion`` is ``None`` when no OpenAI key is configured and ``store``
    is ``None`` when Supabase is not configured. Storage failures are logged
    and never change what the user sees.
    """

    def __init__(
        self,
        settings: Settings,
        completion: Optional[CompletionClient],
        store: Optional[SupabaseStore],
    ) -> None:
        self.settings = settings
        self.completion = completion
        self.store = store
        self.state = DashboardState()
        self._access_token: Optional[str] = None

    @property
    def greeting(self) -> str:
        user = self.state.user
        if user is None:
            return "Welcome to Kairos Guest"
        return f"Welcome to Kairos {user.email or ''}"

    def mount(self, access_token: Optional[str] = None) -> None:
        """Resolve the current user once. Errors leave the dashboard in guest mode."""
        self._access_token = access_token
        if self.store is None or not self.settings.supabase_configured:
            logger.error("Supabase URL or key is missing; check SUPABASE_URL and SUPABASE_KEY")
            self.state.solution = SUPABASE_CONFIG_ERROR
            return

        try:
            self.state.user = self.store.get_user(access_token)
        except StorageError as exc:
            logger.error("Error fetching user from Supabase: %s", exc)
            return
        except Exception as exc:
            logger.exception("Unexpected error fetching user from Supabase: %s", exc)
            return
        if self.state.user:
            logger.info("Dashboard mounted for user_id=%s", self.state.user.id)

    def _record_question(self, question: str) -> Optional[LearnRequest]:
        user = self.state.user
        if user is None:
            logger.warning("User not logged in, skipping Supabase input insert")
            return None
        try:
            row = self.store.insert_request(user.id, question, self._access_token)
        except StorageError as exc:
            # The answer still goes out when logging the question fails
            logger.error("Error inserting into Supabase: %s", exc)
            return None
        except Exception as exc:
            logger.exception("Unexpected error inserting into Supabase: %s", exc)
            return None
        logger.info("Input inserted into Supabase: row_id=%s", row.id)
        return row

    def _record_answer(self, row: Optional[LearnRequest], answer: str) -> None:
        if self.state.user is None or answer == FALLBACK_ANSWER:
            return
        if row is None or row.id is None:
            logger.warning("No inserted row to attach the answer to, skipping Supabase update")
            return
        try:
            updated = self.store.update_response(row.id, answer, self._access_token)
        except StorageError as exc:
            logger.error("Error updating Supabase with OpenAI response: %s", exc)
            return
        except Exception as exc:
            logger.exception("Unexpected error updating Supabase with OpenAI response: %s", exc)
            return
        logger.info("OpenAI response updated in Supabase: row_id=%s rows=%s", row.id, len(updated))

    def handle_learn(self, question: Optional[str] = None) -> DashboardState:
        """Answer the current question and return the resulting state.

        Never raises: configuration, API and unexpected errors all end up in
        ``state.solution`` and ``state.loading`` is always cleared.
        """
        if self.state.loading:
            logger.warning("Submit ignored: a request is already in flight")
            return self.state
        if question is not None:
            self.state.question = question

        question = self.state.question
        if not question.strip():
            self.state.solution = EMPTY_QUESTION_MESSAGE
            return self.state

        self.state.loading = True
        self.state.solution = ""
        try:
            row = self._record_question(question)

            if self.completion is None:
                logger.error("OPENAI_API_KEY is not set in environment variables")
                self.state.solution = OPENAI_CONFIG_ERROR
                return self.state

            answer = self.completion.complete(question) or FALLBACK_ANSWER
            self.state.solution = answer
            self._record_answer(row, answer)
        except CompletionAPIError as exc:
            logger.error("OpenAI API error: %s", exc)
            self.state.solution = API_ERROR_TEMPLATE.format(message=exc.message)
        except Exception as exc:
            logger.exception("Unexpected error while handling learn request: %s", exc)
            self.state.solution = UNREACHABLE_MESSAGE
        finally:
            self.state.loading = False
        return self.state
