"""Configuration settings for the EC2 client runtime.

This module defines the configuration surface of the runtime: the
current service endpoint per service family, the request timestamp
expiry window, credentials handed to the signer, and the retry budgets
of the HTTP error handlers. Settings are loaded from environment
variables and .env files.
"""

from typing import Literal, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    :param ec2_endpoint: Current EC2 (compute) endpoint URI
    :type ec2_endpoint: str
    :param elb_endpoint: Current Elastic Load Balancing endpoint URI
    :type elb_endpoint: str
    :param aws_expire_interval: Seconds added to now for request timestamps
    :type aws_expire_interval: int
    :param aws_access_key_id: Access key consumed by the request signer
    :type aws_access_key_id: Optional[str]
    :param aws_secret_access_key: Secret key consumed by the request signer
    :type aws_secret_access_key: Optional[str]
    :param redirect_retry_limit: Maximum resends for redirection responses
    :type redirect_retry_limit: int
    :param client_error_retry_limit: Maximum resends for client errors
    :type client_error_retry_limit: int
    :param client_error_backoff_seconds: Base backoff for client error retries
    :type client_error_backoff_seconds: float
    :param http_timeout: Timeout in seconds for each HTTP exchange
    :type http_timeout: float
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )

    # Service endpoints
    ec2_endpoint: str = Field(
        "https://ec2.us-east-1.amazonaws.com",
        description="Current EC2 endpoint",
    )
    elb_endpoint: str = Field(
        "https://elasticloadbalancing.us-east-1.amazonaws.com",
        description="Current Elastic Load Balancing endpoint",
    )

    # Request signing inputs
    aws_expire_interval: int = Field(
        30, ge=1, description="Request timestamp expiry window in seconds"
    )
    aws_access_key_id: Optional[str] = Field(None, description="AWS access key id")
    aws_secret_access_key: Optional[str] = Field(
        None, description="AWS secret access key"
    )

    # Error/retry handler budgets
    redirect_retry_limit: int = Field(
        5, ge=0, description="Maximum resends for 3xx responses"
    )
    client_error_retry_limit: int = Field(
        5, ge=0, description="Maximum resends for retryable 4xx responses"
    )
    client_error_backoff_seconds: float = Field(
        0.5, ge=0, description="Base delay for client error backoff"
    )

    http_timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @field_validator("ec2_endpoint", "elb_endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Require an absolute http(s) URI and drop any trailing slash.

        :param v: The configured endpoint
        :type v: str
        :return: Normalised endpoint URI
        :rtype: str
        :raises ValueError: If the endpoint is not an absolute http(s) URI
        """
        parsed = urlparse(v.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"endpoint must be an absolute http(s) URI: {v!r}")
        return v.strip().rstrip("/")


settings = Settings()
"""Global settings instance for the EC2 client runtime.

Components accept an explicit Settings for injection and fall back to
this instance only when none is given.
"""
