import pytest
from pydantic import ValidationError
from cvault_files.models.config import S3Config, AuthConfig


def test_s3_config_defaults():
  config = S3Config(_env_file=None)
  assert config.upload_url_expiry == 300
  assert config.download_url_expiry == 60
  assert config.delete_batch_size == 1000
  assert config.with_checksums is False


def test_s3_config_from_environment(monkeypatch):
  monkeypatch.setenv("CVAULT_BUCKET", "vault")
  monkeypatch.setenv("CVAULT_S3_ENDPOINT_URL", "http://minio:9000")
  monkeypatch.setenv("CVAULT_DELETE_BATCH_SIZE", "250")
  config = S3Config(_env_file=None)
  assert config.bucket == "vault"
  assert config.s3_endpoint_url == "http://minio:9000"
  assert config.delete_batch_size == 250


def test_s3_config_batch_ceiling():
  with pytest.raises(ValidationError):
    S3Config(_env_file=None, delete_batch_size=1001)


def test_auth_config_from_environment(monkeypatch):
  monkeypatch.setenv("CVAULT_KEYCLOAK_REALM", "epfl")
  assert AuthConfig(_env_file=None).keycloak_realm == "epfl"
