import pytest

from yogaschool.core.exceptions import ForbiddenError, NoOpError, NotFoundError, ValidationException
from yogaschool.models.chat.chat_room import direct_message_id
from yogaschool.services.chat import RoomService


@pytest.fixture
def rooms(db):
    return RoomService(db)


async def test_create_group_adds_creator_to_members(rooms, users):
    teacher, student = users["teacher"], users["student"]

    group = await rooms.create_group("Morning Flow", [student.id], teacher.id)

    assert group.is_group is True
    assert group.created_by == teacher.id
    assert set(group.members) == {teacher.id, student.id}


async def test_create_group_collapses_duplicate_members(rooms, users):
    teacher, student = users["teacher"], users["student"]

    group = await rooms.create_group("Pranayama", [student.id, student.id, teacher.id], teacher.id)

    assert sorted(group.members) == sorted([teacher.id, student.id])


async def test_admin_cannot_create_group(rooms, users):
    with pytest.raises(ForbiddenError):
        await rooms.create_group("Staff", [users["teacher"].id], users["admin"].id)


async def test_group_names_need_not_be_unique(rooms, users):
    first = await rooms.create_group("Yin", [], users["teacher"].id)
    second = await rooms.create_group("Yin", [], users["teacher"].id)

    assert first.id != second.id


async def test_delete_group_by_non_creator_is_forbidden(rooms, users):
    group = await rooms.create_group("Vinyasa", [users["student"].id], users["teacher"].id)

    with pytest.raises(ForbiddenError):
        await rooms.delete_group(group.id, users["student"].id)


async def test_delete_group_by_admin_is_forbidden(rooms, users):
    group = await rooms.create_group("Vinyasa", [users["student"].id], users["teacher"].id)

    with pytest.raises(ForbiddenError):
        await rooms.delete_group(group.id, users["admin"].id)


async def test_delete_missing_group_is_not_found(rooms, users):
    with pytest.raises(NotFoundError):
        await rooms.delete_group("no-such-group", users["teacher"].id)


async def test_creator_deletes_group(rooms, users):
    group = await rooms.create_group("Vinyasa", [users["student"].id], users["teacher"].id)

    await rooms.delete_group(group.id, users["teacher"].id)

    assert await rooms.get(group.id) is None


async def test_last_member_leaving_removes_group(rooms, users):
    teacher, student = users["teacher"], users["student"]
    group = await rooms.create_group("Hatha", [student.id], teacher.id)

    still_there = await rooms.leave_group(group.id, student.id)
    assert still_there is not None
    assert still_there.members == [teacher.id]

    assert await rooms.leave_group(group.id, teacher.id) is None
    assert await rooms.get(group.id) is None


async def test_admin_cannot_leave_group(rooms, users):
    group = await rooms.create_group("Hatha", [], users["teacher"].id)

    with pytest.raises(ForbiddenError):
        await rooms.leave_group(group.id, users["admin"].id)


async def test_add_members_only_adds_new_ones(rooms, users):
    teacher, student, student2 = users["teacher"], users["student"], users["student2"]
    group = await rooms.create_group("Ashtanga", [student.id], teacher.id)

    added, updated = await rooms.add_members(group.id, teacher.id, [student.id, student2.id])

    assert added == 1
    assert set(updated.members) == {teacher.id, student.id, student2.id}


async def test_add_members_all_present_is_noop_error(rooms, users):
    teacher, student = users["teacher"], users["student"]
    group = await rooms.create_group("Ashtanga", [student.id], teacher.id)

    with pytest.raises(NoOpError):
        await rooms.add_members(group.id, teacher.id, [student.id])


async def test_add_members_requires_creator(rooms, users):
    group = await rooms.create_group("Ashtanga", [users["student"].id], users["teacher"].id)

    with pytest.raises(ForbiddenError):
        await rooms.add_members(group.id, users["student"].id, [users["student2"].id])


async def test_add_members_requires_a_list(rooms, users):
    group = await rooms.create_group("Ashtanga", [], users["teacher"].id)

    with pytest.raises(ValidationException):
        await rooms.add_members(group.id, users["teacher"].id, [])


async def test_group_detail_resolves_member_summaries(rooms, users):
    teacher, student = users["teacher"], users["student"]
    group = await rooms.create_group("Restorative", [student.id], teacher.id)

    detail = await rooms.get_group_detail(group.id)

    assert {member.id for member in detail.member_details} == {teacher.id, student.id}
    assert {member.role for member in detail.member_details} == {"teacher", "student"}


async def test_group_detail_for_dm_id_is_not_found(rooms, users):
    dm = await rooms.create_or_get_direct_message(users["teacher"].id, users["student"].id)

    with pytest.raises(NotFoundError):
        await rooms.get_group_detail(dm.id)


async def test_direct_message_is_idempotent_in_both_directions(rooms, users):
    teacher, student = users["teacher"], users["student"]

    first = await rooms.create_or_get_direct_message(teacher.id, student.id)
    second = await rooms.create_or_get_direct_message(student.id, teacher.id)
    third = await rooms.create_or_get_direct_message(teacher.id, student.id)

    assert first.id == second.id == third.id == direct_message_id(teacher.id, student.id)
    assert first.id == f"dm_{min(teacher.id, student.id)}_{max(teacher.id, student.id)}"
    assert await rooms.get_total_count() == 1
    assert sorted(first.members) == sorted([teacher.id, student.id])
    assert first.is_group is False


@pytest.mark.parametrize("pair", [("teacher", "teacher2"), ("student", "student2")])
async def test_same_role_direct_message_is_forbidden(rooms, users, pair):
    with pytest.raises(ForbiddenError):
        await rooms.create_or_get_direct_message(users[pair[0]].id, users[pair[1]].id)


async def test_admin_cannot_start_direct_message(rooms, users):
    with pytest.raises(ForbiddenError):
        await rooms.create_or_get_direct_message(users["admin"].id, users["student"].id)


async def test_direct_message_with_admin_counterpart_is_forbidden(rooms, users):
    with pytest.raises(ForbiddenError):
        await rooms.create_or_get_direct_message(users["teacher"].id, users["admin"].id)


async def test_direct_message_with_unknown_user_is_not_found(rooms, users):
    with pytest.raises(NotFoundError):
        await rooms.create_or_get_direct_message(users["teacher"].id, "ghost")


async def test_list_my_chats_uses_live_counterpart_name(rooms, users, db):
    teacher, student = users["teacher"], users["student"]
    await rooms.create_group("Morning Flow", [student.id], teacher.id)
    await rooms.create_or_get_direct_message(teacher.id, student.id)

    student.name = "Samira Student"
    await db.commit()

    chats = await rooms.list_my_chats(teacher.id)

    assert [chat.is_group for chat in chats] == [True, False]
    dm = chats[1]
    assert dm.name == "Samira Student"
    assert dm.other_user_id == student.id


async def test_list_my_chats_forbidden_for_admin_even_as_member(rooms, users, db):
    admin = users["admin"]
    group = await rooms.create_group("Morning Flow", [], users["teacher"].id)
    group.add_member(admin.id)
    await db.commit()

    with pytest.raises(ForbiddenError):
        await rooms.list_my_chats(admin.id)
