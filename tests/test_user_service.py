import pytest
from sqlalchemy import select

from yogaschool.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError, ValidationException
from yogaschool.models import ChatMember, ChatMessage, MessageReceipt, YogaClass
from yogaschool.schemas.chat_schemas import SendMessagePayload
from yogaschool.schemas.user_schemas import SignupRequest
from yogaschool.services.chat import MessageService, RoomService
from yogaschool.services.user_service import UserService, role_for_signup


@pytest.fixture
def accounts(db):
    return UserService(db)


def signup_request(name, email, password="om-shanti"):
    return SignupRequest(
        name=name,
        email=email,
        password=password,
        security_question="First pose?",
        security_answer="tadasana",
    )


@pytest.mark.parametrize("existing,role", [(0, "admin"), (1, "teacher"), (2, "student"), (10, "student")])
def test_role_for_signup(existing, role):
    assert role_for_signup(existing).value == role


async def test_signup_order_assigns_roles(accounts):
    first = await accounts.signup(signup_request("Asha", "asha@example.com"))
    second = await accounts.signup(signup_request("Tara", "tara@example.com"))
    third = await accounts.signup(signup_request("Sam", "sam@example.com"))

    assert [first.role, second.role, third.role] == ["admin", "teacher", "student"]
    assert first.hashed_password != "om-shanti"


async def test_signup_rejects_duplicate_email(accounts):
    await accounts.signup(signup_request("Asha", "asha@example.com"))

    with pytest.raises(ValidationException):
        await accounts.signup(signup_request("Asha Again", "ASHA@example.com"))


async def test_authenticate(accounts):
    await accounts.signup(signup_request("Asha", "asha@example.com"))

    user = await accounts.authenticate("Asha@Example.com", "om-shanti")
    assert user.name == "Asha"

    with pytest.raises(UnauthorizedError):
        await accounts.authenticate("asha@example.com", "wrong")
    with pytest.raises(UnauthorizedError):
        await accounts.authenticate("nobody@example.com", "om-shanti")


async def test_reset_password_with_security_answer(accounts):
    await accounts.signup(signup_request("Asha", "asha@example.com"))
    assert await accounts.get_security_question("asha@example.com") == "First pose?"

    with pytest.raises(UnauthorizedError):
        await accounts.reset_password("asha@example.com", "savasana", "new-pass")

    await accounts.reset_password("asha@example.com", "tadasana", "new-pass")
    assert (await accounts.authenticate("asha@example.com", "new-pass")).name == "Asha"


async def test_security_question_for_unknown_email(accounts):
    with pytest.raises(NotFoundError):
        await accounts.get_security_question("nobody@example.com")


async def test_directory_excludes_admins(accounts, users):
    directory = await accounts.list_directory()

    ids = {entry.id for entry in directory}
    assert users["admin"].id not in ids
    assert ids == {users[key].id for key in ("teacher", "teacher2", "student", "student2")}
    assert [entry.name for entry in directory] == sorted(entry.name for entry in directory)


async def test_require_admin(accounts, users):
    assert (await accounts.require_admin(users["admin"].id)).id == users["admin"].id

    with pytest.raises(UnauthorizedError):
        await accounts.require_admin(None)
    with pytest.raises(ForbiddenError):
        await accounts.require_admin(users["teacher"].id)


async def test_admin_cannot_delete_self(accounts, users):
    with pytest.raises(ValidationException):
        await accounts.delete_user(users["admin"].id, users["admin"])


async def test_delete_unknown_user(accounts, users):
    with pytest.raises(NotFoundError):
        await accounts.delete_user("ghost", users["admin"])


async def test_delete_user_cascades(accounts, users, db):
    teacher, student, student2 = users["teacher"], users["student"], users["student2"]
    rooms = RoomService(db)
    messages = MessageService(db)

    shared = await rooms.create_group("Shared", [student.id], teacher.id)
    solo = await rooms.create_group("Teacher only", [], teacher.id)
    dm = await rooms.create_or_get_direct_message(teacher.id, student2.id)
    await messages.send_message(SendMessagePayload(room_id=shared.id, sender_id=teacher.id, content="from teacher"))
    await messages.send_message(SendMessagePayload(room_id=dm.id, sender_id=teacher.id, content="dm from teacher"))
    kept = await messages.send_message(SendMessagePayload(room_id=shared.id, sender_id=student.id, content="from student"))
    db.add(YogaClass(teacher_id=teacher.id, title="Sunrise Hatha"))
    await db.commit()

    await accounts.delete_user(teacher.id, users["admin"])

    assert await accounts.get(teacher.id) is None
    assert await rooms.get(solo.id) is None

    remaining = await rooms.get(shared.id)
    assert remaining.members == [student.id]
    assert (await rooms.get(dm.id)).members == [student2.id]

    messages_left = (await db.execute(select(ChatMessage))).scalars().all()
    assert [m.id for m in messages_left] == [kept.id]

    receipts = (await db.execute(select(MessageReceipt.user_id))).scalars().all()
    assert receipts == [student.id]

    memberships = (await db.execute(select(ChatMember).where(ChatMember.user_id == teacher.id))).scalars().all()
    assert memberships == []
    assert (await db.execute(select(YogaClass))).scalars().all() == []
