# services/storage.py
import os
import logging
from typing import Dict, Optional, Tuple
from datetime import datetime, timedelta
from urllib.parse import quote

from azure.storage.blob import BlobServiceClient, BlobSasPermissions, ContentSettings, generate_blob_sas

from config import (
    AZURE_CONTAINER,
    AZURE_CONN_STR,
    AZURITE_SAS_VERSION,
    LOCAL_SAVE_DIR,
    PUBLIC_BASE_URL,
    SAS_TTL_MINUTES,
)
from utils.file_utils import is_inside


def parse_conn_str(conn: str) -> Dict[str, Optional[str]]:
    if not conn:
        return {"AccountName": None, "AccountKey": None, "BlobEndpoint": None}

    if "UseDevelopmentStorage=true" in conn:
        return {
            "AccountName": "devstoreaccount1",
            "AccountKey": (
                "Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsu"
                "Fq2UVErCz4I6tq/K1SZFPTOtr/KBHBeksoGMGw=="
            ),
            "BlobEndpoint": "http://127.0.0.1:10000/devstoreaccount1",
        }

    parts = dict(p.split("=", 1) for p in conn.split(";") if "=" in p)
    return {
        "AccountName": parts.get("AccountName"),
        "AccountKey": parts.get("AccountKey"),
        "BlobEndpoint": parts.get("BlobEndpoint"),
    }


def storage_provider() -> str:
    return "azure" if AZURE_CONN_STR else "local"


def blob_service_client():
    if not AZURE_CONN_STR:
        raise RuntimeError("AZURE_STORAGE_CONNECTION_STRING not set")
    info = parse_conn_str(AZURE_CONN_STR)
    if info.get("BlobEndpoint") and info.get("AccountKey"):
        return BlobServiceClient(account_url=info["BlobEndpoint"], credential=info["AccountKey"])
    return BlobServiceClient.from_connection_string(AZURE_CONN_STR)


def upload_and_sas(container: str, blob_name: str, data: bytes, content_type: Optional[str] = None,
                   ttl_minutes: int = SAS_TTL_MINUTES) -> str:
    if not AZURE_CONN_STR:
        raise RuntimeError("AZURE_STORAGE_CONNECTION_STRING not set")

    info = parse_conn_str(AZURE_CONN_STR)
    account_name = info["AccountName"]
    account_key = info["AccountKey"]
    blob_endpoint = info.get("BlobEndpoint")  # e.g. https://<acct>.blob.core.windows.net

    bsc = blob_service_client()
    cc = bsc.get_container_client(container)
    if not cc.exists():
        cc.create_container()

    settings = ContentSettings(content_type=content_type) if content_type else None
    cc.upload_blob(name=blob_name, data=data, overwrite=True, content_settings=settings)

    sas_kwargs = dict(
        account_name=account_name,
        account_key=account_key,
        container_name=container,
        blob_name=blob_name,
        permission=BlobSasPermissions(read=True),
        # allow 5 min clock skew
        start=datetime.utcnow() - timedelta(minutes=5),
        expiry=datetime.utcnow() + timedelta(minutes=ttl_minutes),
    )

    # Only force http/version when running against Azurite
    if blob_endpoint and ("127.0.0.1" in blob_endpoint or "localhost" in blob_endpoint):
        sas_kwargs["protocol"] = "http"
        if AZURITE_SAS_VERSION:
            sas_kwargs["version"] = AZURITE_SAS_VERSION

    sas = generate_blob_sas(**sas_kwargs)

    base = blob_endpoint.rstrip("/") if blob_endpoint else f"https://{account_name}.blob.core.windows.net"
    # The SAS is already encoded; only the blob path is quoted.
    return f"{base}/{container}/{quote(blob_name, safe='/')}?{sas}"


def local_path(blob_name: str) -> str:
    full_path = os.path.join(LOCAL_SAVE_DIR, blob_name)
    if not is_inside(full_path, LOCAL_SAVE_DIR):
        raise ValueError(f"Path escapes the local storage directory: {blob_name}")
    return full_path


def save_local_and_url(blob_name: str, data: bytes) -> str:
    full_path = local_path(blob_name)
    os.makedirs(os.path.dirname(full_path), exist_ok=True)
    with open(full_path, "wb") as f:
        f.write(data)
    return f"{PUBLIC_BASE_URL}/local/{quote(blob_name, safe='/')}"


def dated_folder(root: str, when: Optional[datetime] = None) -> str:
    when = when or datetime.now()
    return f"{root}/{when.year}/{when.month}"


def store_document(folder: str, file_name: str, data: bytes, content_type: Optional[str] = None) -> Dict[str, str]:
    """Upload to Azure when configured, otherwise keep on local disk."""
    folder = (folder or "").strip("/")
    blob_name = f"{folder}/{file_name}" if folder else file_name
    logging.info(f"Storing {blob_name} ({len(data)} bytes) via {storage_provider()} storage")

    if AZURE_CONN_STR:
        url = upload_and_sas(AZURE_CONTAINER, blob_name, data, content_type=content_type)
        blob_path = f"{AZURE_CONTAINER}/{blob_name}"
    else:
        url = save_local_and_url(blob_name, data)
        blob_path = blob_name
    return {"url": url, "provider": storage_provider(), "blob_path": blob_path}


def fetch_document(file_id: str) -> Tuple[str, bytes]:
    """
    Load a stored document by id (blob name, or path relative to LOCAL_SAVE_DIR).
    Returns (file name, content). Raises FileNotFoundError when it does not exist.
    """
    file_id = (file_id or "").lstrip("/")
    if AZURE_CONN_STR:
        bc = blob_service_client().get_blob_client(container=AZURE_CONTAINER, blob=file_id)
        if not bc.exists():
            raise FileNotFoundError(f"Blob not found: {AZURE_CONTAINER}/{file_id}")
        data = bc.download_blob().readall()
        return os.path.basename(file_id), data

    full_path = local_path(file_id)
    if not os.path.isfile(full_path):
        raise FileNotFoundError(f"File not found: {file_id}")
    with open(full_path, "rb") as f:
        return os.path.basename(full_path), f.read()
