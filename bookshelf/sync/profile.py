"""
Profile sync service.
"""

from datetime import date
from typing import Optional

from bookshelf.sync.models import UserProfile
from bookshelf.sync.repository import UserRepository
from bookshelf.sync.states import State, StateSlot
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)


class ProfileSyncService:
    """
    Exposes the profile of the signed-in user and applies profile edits.

    Slots:
        profile_state: Initial | Loading | NotFound | Success(profile) | Error
        update_state: Initial | Loading | Success | Error
    """

    def __init__(self, repository: UserRepository):
        self.repository = repository
        self.profile_state: StateSlot[State[UserProfile]] = StateSlot("profile", State.initial())
        self.update_state: StateSlot[State[None]] = StateSlot("update_profile", State.initial())
        self._selected_image: Optional[bytes] = None

    @property
    def selected_image(self) -> Optional[bytes]:
        return self._selected_image

    def set_selected_image(self, image: Optional[bytes]) -> None:
        """Buffer a picture to upload with the next profile update."""
        self._selected_image = image

    def load_profile(self) -> State[UserProfile]:
        self.profile_state.set(State.loading())
        try:
            profile = self.repository.get_user_profile()
            state = State.success(profile) if profile is not None else State.not_found()
        except Exception as e:
            logger.error("Loading profile failed", error=str(e))
            state = State.error(f"Could not load profile: {e}")

        self.profile_state.set(state)
        return state

    def update_profile(
        self,
        first_name: str,
        last_name: str,
        second_last_name: str = "",
        birth_date: Optional[date] = None,
    ) -> State[None]:
        """
        Validate and write the profile, uploading the buffered image if any.

        Blank first or last names fail without touching the store. With
        nobody signed in the update is a no-op and the slot stays Initial.
        """
        if not first_name or not first_name.strip() or not last_name or not last_name.strip():
            state = State.error("First name and last name are required")
            self.update_state.set(state)
            return state

        if self.repository.auth.current_uid() is None:
            logger.info("Profile update skipped, nobody is signed in")
            self.update_state.set(State.initial())
            return self.update_state.value

        self.update_state.set(State.loading())
        try:
            updated = self.repository.update_user_profile(
                first_name=first_name,
                last_name=last_name,
                second_last_name=second_last_name,
                birth_date=birth_date,
                profile_image=self._selected_image,
            )
        except Exception as e:
            logger.error("Updating profile failed", error=str(e))
            state = State.error(f"Could not update profile: {e}")
            self.update_state.set(state)
            return state

        if not updated:
            state = State.error("Could not update profile")
            self.update_state.set(state)
            return state

        state = State.success()
        self.update_state.set(state)
        self.load_profile()
        self._selected_image = None
        return state
