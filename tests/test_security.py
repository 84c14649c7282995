from invoicy.security import PasswordService


def test_hash_round_trip_and_salted_output():
    service = PasswordService(iterations=1_000)
    first = service.hash("s3cret")
    second = service.hash("s3cret")

    assert first != second
    assert first.startswith("pbkdf2$sha256$1000$")
    assert service.verify("s3cret", first)
    assert not service.verify("other", first)


def test_verify_rejects_malformed_hashes():
    service = PasswordService()
    assert not service.verify("s3cret", "")
    assert not service.verify("s3cret", "md5$x$1$a$b")
    assert not service.verify("s3cret", "pbkdf2$sha256$many$a$b")
    assert not service.verify("s3cret", "pbkdf2$nosuchhash$1$YQ==$YQ==")
