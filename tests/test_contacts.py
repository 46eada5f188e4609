import pytest

from wayguard.core.errors import Unauthenticated, ValidationError


async def test_primary_contacts_listed_first(contacts):
    await contacts.add("user-1", "Ravi", "111")
    await contacts.add("user-1", "Meera", "222", relationship="sister", is_primary=True)
    await contacts.add("user-2", "Other", "333")

    listed = await contacts.list_for_user("user-1")

    assert [c.name for c in listed] == ["Meera", "Ravi"]
    assert await contacts.count_for_user("user-1") == 2
    assert await contacts.count_for_user("user-3") == 0


async def test_requires_identity(contacts):
    with pytest.raises(Unauthenticated):
        await contacts.list_for_user(None)
    with pytest.raises(Unauthenticated):
        await contacts.add(None, "Ravi", "111")


async def test_name_and_phone_required(contacts):
    with pytest.raises(ValidationError) as exc:
        await contacts.add("user-1", "", "111")
    assert exc.value.field == "name"
    with pytest.raises(ValidationError) as exc:
        await contacts.add("user-1", "Ravi", " ")
    assert exc.value.field == "phone"
