"""Authenticate with Microsoft Entra ID instead of a connection string.

Passing a bare account name makes the client use ``DefaultAzureCredential``,
which tries environment variables, managed identity and developer logins in
turn. A specific credential can be passed as the third argument.
"""

import asyncio
import os

from azure.identity import ManagedIdentityCredential
from azure.identity.aio import DefaultAzureCredential as AsyncDefaultAzureCredential
from dotenv import load_dotenv

from simple_storage.blob import AuthenticationError, BlobClient
from simple_storage.blob.aio import AsyncBlobClient

load_dotenv()

ACCOUNT_NAME = os.getenv("AZURE_STORAGE_ACCOUNT_NAME", "mystorageaccount")
CONTAINER = os.getenv("AZURE_STORAGE_CONTAINER_NAME", "my-container")


def using_default_credential() -> None:
    with BlobClient(ACCOUNT_NAME, CONTAINER) as client:
        client.upload_from_string("managed-identity-test.txt", "Hello from managed identity!")
        print("downloaded:", client.download_as_string("managed-identity-test.txt"))
        client.delete("managed-identity-test.txt")


def using_user_assigned_identity() -> None:
    client_id = os.getenv("AZURE_CLIENT_ID")
    if not client_id:
        print("AZURE_CLIENT_ID not set, skipping user-assigned identity")
        return

    credential = ManagedIdentityCredential(client_id=client_id)
    with BlobClient(ACCOUNT_NAME, CONTAINER, credential) as client:
        print("exists:", client.exists("some-file.txt"))
    credential.close()


async def using_async_credential() -> None:
    async with AsyncDefaultAzureCredential() as credential:
        async with AsyncBlobClient(
            f"https://{ACCOUNT_NAME}.blob.core.windows.net", CONTAINER, credential
        ) as client:
            for item in await client.list_blobs(max_results=5):
                print(f"  - {item.name}")


def main() -> None:
    try:
        using_default_credential()
        using_user_assigned_identity()
        asyncio.run(using_async_credential())
    except AuthenticationError as exc:
        print("authentication failed:", exc.message)


if __name__ == "__main__":
    main()
