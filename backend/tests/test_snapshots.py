import pytest

from horario_escolar.core.exceptions import PersistenceError, ResourceNotFoundError, TimetableValidationError
from horario_escolar.models.audit_entry import ChangeType
from horario_escolar.models.lesson_slot import LessonSlot
from horario_escolar.models.user import User, UserRole
from horario_escolar.schemas.timetable import LessonContent
from horario_escolar.services.audit import AuditFilters, query_audit
from horario_escolar.services.snapshots import (
    create_snapshot,
    delete_snapshot,
    diff_group,
    diff_snapshot_with_live,
    get_snapshot,
    list_snapshots,
    restore_snapshot,
)
from horario_escolar.services.timetable_store import (
    read_full_timetable,
    read_group_timetable,
    stranded_lessons,
    upsert_slot,
)


def save(db, layout, user, slot_id, day="Segunda", **content):
    upsert_slot(db, layout, group_id="fund2", day=day, slot_id=slot_id, content=LessonContent(**content), user=user)
    db.commit()


def snapshot_live(db, layout, user, name="Versão 1"):
    snapshot = create_snapshot(
        db,
        name=name,
        description=None,
        timetable=read_full_timetable(db, layout),
        user=user,
    )
    db.commit()
    return snapshot


def test_create_then_get_returns_equal_payload(db_session, make_user, small_layout):
    user = make_user()
    save(db_session, small_layout, user, 1, disciplina="Matemática", professor="Alice", turma="6A")
    live = read_full_timetable(db_session, small_layout)

    snapshot = snapshot_live(db_session, small_layout, user)
    stored = get_snapshot(db_session, snapshot.id)

    assert stored.dados == live
    assert stored.nome == "Versão 1"
    assert stored.usuario.id == user.id


def test_snapshot_is_not_affected_by_later_edits(db_session, make_user, small_layout):
    user = make_user()
    timetable = read_full_timetable(db_session, small_layout)
    snapshot = create_snapshot(db_session, name="Antes", description="vazio", timetable=timetable, user=user)
    db_session.commit()

    timetable["fund2"]["Segunda"][1] = LessonContent(disciplina="Artes")

    assert get_snapshot(db_session, snapshot.id).dados["fund2"]["Segunda"][1] is None


def test_get_missing_snapshot_is_none(db_session):
    assert get_snapshot(db_session, 999) is None


def test_list_is_newest_first_and_respects_limit(db_session, make_user, small_layout):
    user = make_user(role=UserRole.vice_direcao, name="Vera")
    for index in range(3):
        snapshot_live(db_session, small_layout, user, name=f"Versão {index}")

    listed = list_snapshots(db_session, limit=2)

    assert [item.nome for item in listed] == ["Versão 2", "Versão 1"]
    assert listed[0].usuario.nome == "Vera"
    assert listed[0].usuario.perfil == UserRole.vice_direcao


def test_delete_missing_snapshot_raises(db_session):
    with pytest.raises(ResourceNotFoundError):
        delete_snapshot(db_session, 42)


def test_diff_against_identical_timetable_is_empty(db_session, make_user, small_layout):
    user = make_user()
    save(db_session, small_layout, user, 1, disciplina="Matemática", professor="Alice", turma="6A")
    snapshot = snapshot_live(db_session, small_layout, user)

    diff = diff_snapshot_with_live(db_session, small_layout, snapshot_id=snapshot.id, group_id="fund2")

    assert diff.diferencas == []


def test_diff_reports_each_changed_field_by_lesson_number(small_layout):
    slots = small_layout.slots_for("fund2")
    snapshot_group = {"Segunda": {5: LessonContent(disciplina="Matemática", professor="Alice", turma="6A")}}
    live_group = {"Segunda": {5: LessonContent(disciplina="Física", professor="Alice")}}

    diffs = diff_group(snapshot_group, live_group, slots, small_layout.dias_semana)

    assert [(d.dia, d.aula, d.campo, d.de, d.para) for d in diffs] == [
        ("Segunda", 4, "turma", "6A", ""),
        ("Segunda", 4, "disciplina", "Matemática", "Física"),
    ]


def test_diff_treats_missing_and_empty_as_equal(small_layout):
    slots = small_layout.slots_for("fund2")
    snapshot_group = {"Segunda": {1: None}}
    live_group = {"Segunda": {1: LessonContent()}, "Terça": {}}

    assert diff_group(snapshot_group, live_group, slots, small_layout.dias_semana) == []


def test_restore_then_diff_is_empty_and_writes_one_audit_entry(db_session, make_user, small_layout):
    user = make_user()
    save(db_session, small_layout, user, 1, disciplina="Matemática", professor="Alice", turma="6A")
    snapshot = snapshot_live(db_session, small_layout, user)
    save(db_session, small_layout, user, 1, disciplina="Física", professor="Bruno", turma="6A")
    save(db_session, small_layout, user, 2, day="Terça", disciplina="Artes", professor="Bia", turma="7B")
    entries_before = len(query_audit(db_session, AuditFilters()))

    result = restore_snapshot(db_session, small_layout, snapshot_id=snapshot.id, user=user)

    assert result.aulas_restauradas == 1
    assert result.grupos == ["fund2"]
    diff = diff_snapshot_with_live(db_session, small_layout, snapshot_id=snapshot.id, group_id="fund2")
    assert diff.diferencas == []

    entries = query_audit(db_session, AuditFilters())
    assert len(entries) == entries_before + 1
    restore_entry = entries[0]
    assert restore_entry.tipo_alteracao == ChangeType.atualizar
    assert restore_entry.tabela == "horarios"
    assert restore_entry.grupo_id is None
    assert restore_entry.campo_alterado is None
    assert restore_entry.valor_novo == {"snapshotId": snapshot.id, "nome": "Versão 1"}


def test_restore_missing_snapshot_raises(db_session, make_user, small_layout):
    with pytest.raises(ResourceNotFoundError):
        restore_snapshot(db_session, small_layout, snapshot_id=7, user=make_user())


def test_failed_restore_leaves_live_timetable_untouched(db_session, make_user, small_layout):
    user = make_user()
    save(db_session, small_layout, user, 2, disciplina="Geografia", professor="Caio", turma="8C")
    snapshot = create_snapshot(
        db_session,
        name="Com aula",
        description=None,
        timetable={"fund2": {"Segunda": {1: LessonContent(disciplina="Matemática", professor="Alice", turma="6A")}}},
        user=user,
    )
    db_session.commit()
    before = read_full_timetable(db_session, small_layout)
    entries_before = len(query_audit(db_session, AuditFilters()))
    # Not persisted, so every row it writes violates the users foreign key.
    ghost = User(id="fantasma", name="Fantasma", email="fantasma@escola.example.com", hashed_password="x", role=UserRole.direcao)

    with pytest.raises(PersistenceError):
        restore_snapshot(db_session, small_layout, snapshot_id=snapshot.id, user=ghost)

    assert read_full_timetable(db_session, small_layout) == before
    assert len(query_audit(db_session, AuditFilters())) == entries_before


def test_restore_rejects_content_on_break_slot(db_session, make_user, small_layout):
    user = make_user()
    save(db_session, small_layout, user, 1, disciplina="Matemática", professor="Alice", turma="6A")
    snapshot = create_snapshot(
        db_session,
        name="Inválido",
        description=None,
        timetable={"fund2": {"Segunda": {4: LessonContent(disciplina="Recreio")}}},
        user=user,
    )
    db_session.commit()
    before = read_full_timetable(db_session, small_layout)

    with pytest.raises(TimetableValidationError):
        restore_snapshot(db_session, small_layout, snapshot_id=snapshot.id, user=user)

    assert read_full_timetable(db_session, small_layout) == before


def test_rows_outside_the_layout_are_not_read_or_snapshotted(db_session, make_user, small_layout):
    user = make_user()
    save(db_session, small_layout, user, 1, disciplina="Matemática", professor="Alice", turma="6A")
    # Written under an older layout: a group that no longer exists and a slot that is now a break.
    db_session.add(LessonSlot(group_id="medio", day="Segunda", slot_id=1, disciplina="Física", updated_by_id=user.id))
    db_session.add(LessonSlot(group_id="fund2", day="Terça", slot_id=4, disciplina="Artes", updated_by_id=user.id))
    db_session.commit()

    live = read_full_timetable(db_session, small_layout)
    assert set(live) == {"fund2"}
    assert 4 not in live["fund2"]["Terça"]
    assert 4 not in read_group_timetable(db_session, small_layout, "fund2")["Terça"]
    assert [(row.group_id, row.slot_id) for row in stranded_lessons(db_session, small_layout)] == [
        ("fund2", 4),
        ("medio", 1),
    ]

    snapshot = snapshot_live(db_session, small_layout, user)
    result = restore_snapshot(db_session, small_layout, snapshot_id=snapshot.id, user=user)

    assert result.aulas_restauradas == 1
    assert stranded_lessons(db_session, small_layout) == []
