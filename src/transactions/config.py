"""
Configuration of the transaction layer.

Values default to the field defaults and can be overridden through environment
variables (or a .env file) named ONTOLOGY_TX_<FIELD>, e.g.
ONTOLOGY_TX_VALIDATE_ON_COMMIT=false.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

ENV_PREFIX = "ONTOLOGY_TX_"


class TransactionConfig(BaseModel):
    """Configuration options for transactions created by TransactionService."""

    resource_namespace: str = Field(
        default="urn:uuid:", min_length=1,
        description="Prefix of the IRIs minted for newly created resources",
    )
    validate_on_commit: bool = Field(
        default=True,
        description="Validate the schema before committing (False creates plain transactions)",
    )
    log_queries: bool = Field(default=False, description="Log every rendered query at DEBUG level")

    @classmethod
    def from_env(cls) -> "TransactionConfig":
        """Build a configuration from ONTOLOGY_TX_* environment variables.

        :raises pydantic.ValidationError: If a variable holds an invalid value
        """
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls(**values)
