"""
Tests for ProfileSyncService.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from bookshelf.store.base import BlobStorage, StoreError
from bookshelf.sync.profile import ProfileSyncService
from bookshelf.sync.repository import UserRepository
from bookshelf.sync.states import Status

from conftest import UID

PROFILE_PATH = f"users/{UID}/profile"


@pytest.fixture
def signed_out_service(store, blobs, signed_out):
    return ProfileSyncService(UserRepository(store, blobs, signed_out))


class TestLoadProfile:
    def test_signed_out_is_not_found(self, signed_out_service):
        assert signed_out_service.load_profile().status is Status.NOT_FOUND

    def test_absent_document_is_not_found(self, profile_service):
        assert profile_service.load_profile().status is Status.NOT_FOUND

    def test_stored_uid_is_replaced_by_identity(self, profile_service, store):
        store.set(PROFILE_PATH, {
            "uid": "someone-else",
            "firstName": "Ada",
            "lastName": "Lovelace",
            "birthDate": "1815-12-10",
        })

        state = profile_service.load_profile()

        assert state.is_success
        assert state.data.uid == UID
        assert state.data.first_name == "Ada"
        assert state.data.birth_date == date(1815, 12, 10)

    def test_store_failure_is_error(self, failing_store, blobs, auth):
        service = ProfileSyncService(UserRepository(failing_store, blobs, auth))
        assert service.load_profile().is_error


class TestUpdateProfile:
    @pytest.mark.parametrize("first_name, last_name", [("", "Lovelace"), ("Ada", "  ")])
    def test_blank_names_fail_without_store_access(self, store, auth, first_name, last_name):
        blobs = MagicMock(spec=BlobStorage)
        service = ProfileSyncService(UserRepository(store, blobs, auth))
        service.set_selected_image(b"jpeg")
        seen = []
        service.update_state.subscribe(lambda s: seen.append(s.status), replay=False)

        state = service.update_profile(first_name, last_name, "", None)

        assert state.is_error
        assert seen == [Status.ERROR]
        assert store.get(PROFILE_PATH) is None
        blobs.upload.assert_not_called()

    def test_update_writes_and_reloads(self, profile_service, store):
        state = profile_service.update_profile("Ada", "Lovelace", "Byron", date(1815, 12, 10))

        assert state.is_success
        assert store.get(PROFILE_PATH) == {
            "uid": UID,
            "firstName": "Ada",
            "lastName": "Lovelace",
            "secondLastName": "Byron",
            "birthDate": "1815-12-10",
            "profilePictureUrl": "",
        }
        loaded = profile_service.profile_state.value
        assert loaded.is_success
        assert loaded.data.second_last_name == "Byron"

    def test_selected_image_is_uploaded_then_cleared(self, profile_service, blobs):
        profile_service.set_selected_image(b"\xff\xd8picture")

        profile_service.update_profile("Ada", "Lovelace")

        url = profile_service.profile_state.value.data.profile_picture_url
        assert url == f"http://media.test/media/profile_pictures/{UID}.jpg"
        assert blobs.resolve(f"profile_pictures/{UID}.jpg").read_bytes() == b"\xff\xd8picture"
        assert profile_service.selected_image is None

    def test_existing_picture_is_kept_without_new_image(self, profile_service, store):
        store.set(PROFILE_PATH, {
            "uid": UID,
            "firstName": "Ada",
            "lastName": "Lovelace",
            "profilePictureUrl": "http://media.test/media/old.jpg",
        })

        profile_service.update_profile("Augusta Ada", "King")

        assert store.get(PROFILE_PATH)["profilePictureUrl"] == "http://media.test/media/old.jpg"
        assert profile_service.profile_state.value.data.first_name == "Augusta Ada"

    def test_upload_failure_is_error_and_nothing_written(self, store, auth):
        blobs = MagicMock(spec=BlobStorage)
        blobs.upload.side_effect = StoreError("bucket unavailable")
        service = ProfileSyncService(UserRepository(store, blobs, auth))
        service.set_selected_image(b"jpeg")

        state = service.update_profile("Ada", "Lovelace")

        assert state.is_error
        assert "bucket unavailable" in state.message
        assert store.get(PROFILE_PATH) is None
        assert service.selected_image == b"jpeg"

    def test_signed_out_update_is_a_no_op(self, signed_out_service, store):
        state = signed_out_service.update_profile("Ada", "Lovelace")

        assert state.status is Status.INITIAL
        assert store.get("users") is None
