import pytest
from botocore.exceptions import ClientError
from enacit4r_storage.services.errors import (
    InvalidPathError, NotFoundError, StorageError, StorageIOError, is_not_found, translate_error, translated)


def client_error(code, status=400):
    return ClientError({"Error": {"Code": code, "Message": "error"}, "ResponseMetadata": {"HTTPStatusCode": status}}, "HeadObject")


class TestTranslateError:
    """Test suite for the error translation."""

    @pytest.mark.parametrize("code", ["404", "NoSuchKey", "NotFound", "NoSuchBucket", "ResourceNotFound"])
    def test_not_found_codes(self, code):
        """Test S3 not found codes become NotFoundError."""
        error = translate_error(client_error(code), "/main/file.txt")
        assert isinstance(error, NotFoundError)
        assert error.key == "/main/file.txt"

    def test_not_found_status(self):
        """Test a 404 status becomes NotFoundError whatever the code."""
        assert isinstance(translate_error(client_error("Other", 404)), NotFoundError)

    def test_python_not_found(self):
        """Test file system not found errors become NotFoundError."""
        assert isinstance(translate_error(FileNotFoundError("gone")), NotFoundError)
        assert isinstance(translate_error(NotADirectoryError("not a dir")), NotFoundError)

    def test_other_errors(self):
        """Test any other failure becomes StorageIOError with its cause."""
        cause = client_error("AccessDenied", 403)
        error = translate_error(cause, "/main/file.txt")
        assert isinstance(error, StorageIOError)
        assert error.cause is cause
        assert "AccessDenied" in str(error)
        assert isinstance(translate_error(ConnectionError("refused")), StorageIOError)

    def test_storage_errors_pass_through(self):
        """Test storage errors are not translated again."""
        error = InvalidPathError()
        assert translate_error(error) is error

    def test_is_not_found(self):
        """Test the not found predicate."""
        assert is_not_found(NotFoundError())
        assert is_not_found(client_error("NoSuchKey"))
        assert not is_not_found(client_error("AccessDenied", 403))
        assert not is_not_found(ValueError("bad"))

    def test_str(self):
        """Test the message reports the tenant and the key."""
        assert str(StorageError("failed", tenant_id="main", key="/a")) == "failed tenant_id=main key=/a"

    def test_translated_block(self):
        """Test the context manager chains the backend error."""
        with pytest.raises(NotFoundError) as exc_info:
            with translated("/main/file.txt"):
                raise FileNotFoundError("gone")
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        with pytest.raises(InvalidPathError):
            with translated("/main/file.txt"):
                raise InvalidPathError()
