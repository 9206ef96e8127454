"""Process configuration read from the environment."""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


@dataclass(frozen=True)
class Settings:
    """Settings for one service process.

    Attributes:
        port: Port the HTTP server listens on
        host: Interface the HTTP server binds to
        dynamodb_endpoint: Local DynamoDB URL; None means AWS DynamoDB
        aws_region: AWS region for DynamoDB
        aws_access_key_id: Credentials for a local DynamoDB endpoint
        aws_secret_access_key: Credentials for a local DynamoDB endpoint
        menu_items_table: Name of the menu items table
        orders_table: Name of the orders table
        create_tables: Create missing tables at startup
        upload_dir: Directory uploaded images are written to and served from
        log_level: Root logging level
        environment: Deployment environment name
        enable_otel: Export traces and metrics over OTLP
        otel_service_name: Service name reported on traces and metrics
        otel_exporter_endpoint: Base URL of the OTLP HTTP collector
    """

    port: int = 5000
    host: str = "0.0.0.0"
    dynamodb_endpoint: str | None = None
    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    menu_items_table: str = "menu-items"
    orders_table: str = "orders"
    create_tables: bool = False
    upload_dir: str = "uploads"
    log_level: str = "INFO"
    environment: str = "development"
    enable_otel: bool = True
    otel_service_name: str = "ordering-svc"
    otel_exporter_endpoint: str = "http://localhost:4318"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Returns:
            Settings with defaults for anything unset

        Raises:
            ValueError: If PORT is not an integer
        """
        return cls(
            port=int(os.getenv("PORT", "5000")),
            host=os.getenv("HOST", "0.0.0.0"),
            dynamodb_endpoint=os.getenv("DYNAMODB_ENDPOINT") or None,
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
            menu_items_table=os.getenv("DYNAMODB_MENU_ITEMS_TABLE", "menu-items"),
            orders_table=os.getenv("DYNAMODB_ORDERS_TABLE", "orders"),
            create_tables=_env_flag("CREATE_TABLES", "false"),
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            environment=os.getenv("ENVIRONMENT", "development"),
            enable_otel=_env_flag("ENABLE_OTEL", "true"),
            otel_service_name=os.getenv("OTEL_SERVICE_NAME", "ordering-svc"),
            otel_exporter_endpoint=os.getenv(
                "OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318"
            ),
        )
