from __future__ import annotations

import pytest

from app.errors import RecordError, RecordErrorCode
from app.repositories.vaccination_type_repository import VaccinationTypeRepository
from tests.fakes import FakeSupabase


def test_list_all_empty(vaccination_repo: VaccinationTypeRepository) -> None:
    assert vaccination_repo.list_all() == []


def test_list_all_newest_first(vaccination_repo: VaccinationTypeRepository) -> None:
    first = vaccination_repo.create("Hepatitis B", "Prevents hepatitis B.", "u1")
    second = vaccination_repo.create("Influenza (Flu)", "Seasonal flu.", "u1")

    assert [r.id for r in vaccination_repo.list_all()] == [second.id, first.id]


def test_create_then_get_by_id(vaccination_repo: VaccinationTypeRepository) -> None:
    created = vaccination_repo.create("MMR", "Measles, mumps, rubella.", "u1")

    fetched = vaccination_repo.get_by_id(created.id)

    assert fetched.title == "MMR"
    assert fetched.description == "Measles, mumps, rubella."
    assert fetched.created_by == "u1"
    assert fetched.created_at is not None
    assert fetched.updated_at is not None


def test_update_changes_only_description(vaccination_repo: VaccinationTypeRepository) -> None:
    created = vaccination_repo.create("Tdap", "old", "u1")

    updated = vaccination_repo.update(created.id, "Booster every 10 years.")

    assert updated.description == "Booster every 10 years."
    assert updated.title == created.title
    assert updated.created_at == created.created_at
    assert updated.created_by == created.created_by
    assert updated.updated_at > created.updated_at


def test_update_unknown_id_is_not_found(vaccination_repo: VaccinationTypeRepository) -> None:
    with pytest.raises(RecordError) as excinfo:
        vaccination_repo.update("missing", "desc")
    assert excinfo.value.code is RecordErrorCode.NOT_FOUND


def test_get_by_id_unknown_is_not_found(vaccination_repo: VaccinationTypeRepository) -> None:
    with pytest.raises(RecordError) as excinfo:
        vaccination_repo.get_by_id("missing")
    assert excinfo.value.is_not_found


def test_second_delete_fails(vaccination_repo: VaccinationTypeRepository) -> None:
    created = vaccination_repo.create("Polio", "IPV.", "u1")
    vaccination_repo.delete(created.id)

    with pytest.raises(RecordError):
        vaccination_repo.delete(created.id)


def test_search_is_case_insensitive_title_substring(
    vaccination_repo: VaccinationTypeRepository,
) -> None:
    covid = vaccination_repo.create("COVID-19", "SARS-CoV-2.", "u1")
    vaccination_repo.create("Influenza (Flu)", "mentions covid in description only", "u1")

    results = vaccination_repo.search("covid")

    assert [r.id for r in results] == [covid.id]
    all_ids = {r.id for r in vaccination_repo.list_all()}
    assert {r.id for r in results} <= all_ids


def test_search_empty_query_returns_everything(
    vaccination_repo: VaccinationTypeRepository,
) -> None:
    vaccination_repo.create("COVID-19", "a", "u1")
    vaccination_repo.create("Hepatitis B", "b", "u1")

    assert vaccination_repo.search("") == vaccination_repo.list_all()


def test_search_treats_wildcards_literally(vaccination_repo: VaccinationTypeRepository) -> None:
    vaccination_repo.create("Hepatitis B", "b", "u1")
    discounted = vaccination_repo.create("Promo 50% dose", "c", "u1")

    assert vaccination_repo.search("%") == [discounted]
    assert vaccination_repo.search("_") == []


def test_backend_error_message_is_verbatim(
    vaccination_repo: VaccinationTypeRepository, fake_supabase: FakeSupabase,
) -> None:
    fake_supabase.fail_table("vaccination_types", "permission denied for table vaccination_types")

    with pytest.raises(RecordError) as excinfo:
        vaccination_repo.list_all()

    assert excinfo.value.message == "permission denied for table vaccination_types"
    assert excinfo.value.code is RecordErrorCode.BACKEND
    assert excinfo.value.original_error is not None


def test_create_update_delete_scenario(vaccination_repo: VaccinationTypeRepository) -> None:
    created = vaccination_repo.create("COVID-19", "desc", "U1")
    fetched = vaccination_repo.get_by_id(created.id)
    assert fetched.created_by == "U1"

    vaccination_repo.update(created.id, "new desc")
    fetched = vaccination_repo.get_by_id(created.id)
    assert fetched.description == "new desc"
    assert fetched.title == "COVID-19"

    vaccination_repo.delete(created.id)
    with pytest.raises(RecordError) as excinfo:
        vaccination_repo.get_by_id(created.id)
    assert excinfo.value.code is RecordErrorCode.NOT_FOUND
