"""
NocoDB configuration settings.

Connection parameters for the NocoDB REST API and the table ids
of every table the application reads or writes.

Dependencies: pydantic, pydantic_settings
System role: NocoDB connection and table registry configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from backend.configs.base import BaseSettings


class NocoDBSettings(BaseSettings):
    """NocoDB REST API configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NOCODB_",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:8080/api/v2",
        description="NocoDB API base URL including the /api/v2 suffix",
    )
    api_token: str = Field(default="", description="NocoDB API token sent as xc-token")
    timeout_seconds: float = Field(default=30.0, description="HTTP request timeout in seconds")

    # Process tables
    table_processos_importacao: str = Field(default="mny50szv4gbt195")
    table_processo_documento_rel: str = Field(default="mkdkorw13nh2gd9")
    table_document_uploads: str = Field(default="m6vjb2ircsf2kry")
    table_etapa_audit: str = Field(
        default="etapa_audit",
        description="Audit log table id; requests fail softly when it is not provisioned",
    )

    # Document tables
    table_di_headers: str = Field(default="m9qiln8qgkcnmef")
    table_di_items: str = Field(default="mqlpl3s0wwm7lo3")
    table_di_tax_info: str = Field(default="mbjo5merhxuki9p")
    table_commercial_invoice_headers: str = Field(default="mtqwpm79yju1buj")
    table_commercial_invoice_items: str = Field(default="mi6rg0i8prkersd")
    table_packing_list_headers: str = Field(default="m5cyxr0o5pqqfx0")
    table_packing_list_containers: str = Field(default="mpj2tx2ad68vcqt")
    table_packing_list_items: str = Field(default="m0qyfhv7iih2tqo")
    table_proforma_invoice_headers: str = Field(default="mvqdwtl7vyq3k9t")
    table_proforma_invoice_items: str = Field(default="mccm8hfg71d1ecr")
    table_swift: str = Field(default="m9w1hyki9w77zd7")
    table_numerario: str = Field(default="m072re89i8a8nco")
    table_nota_fiscal_headers: str = Field(default="mby8zu4qlbxe441")
    table_nota_fiscal_items: str = Field(default="m62dvz7fghrgbes")
