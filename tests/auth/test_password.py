"""Tests for password hashing."""

from devwars.auth.password import hash_password, verify_password


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("SecureP@ss1")
        assert verify_password("SecureP@ss1", hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("CorrectP@ss1")
        assert verify_password("WrongP@ss1", hashed) is False

    def test_hash_is_argon2id(self):
        assert hash_password("TestP@ss1").startswith("$argon2id$")

    def test_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_garbage_hash_rejected(self):
        assert verify_password("anything", "not-a-hash") is False
