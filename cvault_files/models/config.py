"""
CVault configuration

Settings are read from environment variables prefixed with `CVAULT_`, or from a
.env file in the current working directory. Each service receives its settings
explicitly in its constructor.
"""
from typing import Annotated, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "cvault_"

# S3 DeleteObjects accepts at most 1000 keys per request
MAX_DELETE_BATCH_SIZE = 1000


class S3Config(BaseSettings):
  model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_file=".env", extra="ignore")

  s3_endpoint_url: Annotated[
    Optional[str],
    Field(description="Endpoint of an S3 compatible service, None for AWS"),
  ] = None
  s3_access_key_id: Optional[str] = None
  s3_secret_access_key: Optional[str] = None
  region: str = "us-east-1"
  bucket: Annotated[str, Field(description="Bucket holding the user files")] = "cvault"
  path_prefix: Annotated[
    str,
    Field(description="Optional prefix within the bucket, prepended to every key"),
  ] = ""
  with_checksums: Annotated[
    bool,
    Field(description="Disable to talk to S3 compatible services that do not support checksums"),
  ] = False
  upload_url_expiry: Annotated[int, Field(gt=0, description="Upload URL lifetime, in seconds")] = 300
  download_url_expiry: Annotated[int, Field(gt=0, description="Download URL lifetime, in seconds")] = 60
  delete_batch_size: Annotated[int, Field(gt=0, le=MAX_DELETE_BATCH_SIZE)] = MAX_DELETE_BATCH_SIZE


class AuthConfig(BaseSettings):
  model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_file=".env", extra="ignore")

  keycloak_url: str = "http://localhost:8080"
  keycloak_realm: str = "cvault"
  keycloak_client_id: str = "cvault"
  keycloak_client_secret: Optional[str] = None
