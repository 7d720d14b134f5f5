# tests/test_lock_service.py


def test_lock_is_exclusive_per_user(lock_service):
    assert lock_service.acquire_checkout_lock(1, "a", 30)
    assert not lock_service.acquire_checkout_lock(1, "b", 30)
    assert lock_service.acquire_checkout_lock(2, "b", 30)


def test_only_holder_can_release(lock_service, fake_redis):
    lock_service.acquire_checkout_lock(1, "holder", 30)

    assert not lock_service.release_checkout_lock(1, "intruder")
    assert fake_redis.get("checkout:user:1:lock") == "holder"

    assert lock_service.release_checkout_lock(1, "holder")
    assert fake_redis.get("checkout:user:1:lock") is None


def test_lock_expires(lock_service, fake_redis):
    lock_service.acquire_checkout_lock(1, "holder", 30)
    assert 0 < fake_redis.ttl("checkout:user:1:lock") <= 30


def test_tokens_are_unique(lock_service):
    assert lock_service.new_token() != lock_service.new_token()
