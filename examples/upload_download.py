import asyncio
import os
import tempfile

from dotenv import load_dotenv

from simple_storage.blob import BlobClient, ByteRange, ClientOptions, ProgressEvent
from simple_storage.blob.aio import AsyncBlobClient

load_dotenv()


def on_progress(event: ProgressEvent) -> None:
    if event.percent_complete is not None:
        print(f"progress: {event.loaded_bytes}/{event.total_bytes} bytes ({event.percent_complete}%)")
    else:
        print(f"progress: {event.loaded_bytes} bytes")


async def on_progress_async(event: ProgressEvent) -> None:
    on_progress(event)


def sync_files(conn_str: str, container: str) -> None:
    with BlobClient(conn_str, container, ClientOptions(create_container_if_not_exists=True)) as client:
        with tempfile.TemporaryDirectory() as tmpdir:
            src = os.path.join(tmpdir, "report.csv")
            with open(src, "w") as f:
                f.write("id,value\n" + "".join(f"{i},{i * i}\n" for i in range(1000)))

            client.upload_from_file("examples/report.csv", src, on_progress=on_progress)

            dst = os.path.join(tmpdir, "downloads", "report.csv")
            written = client.download_to_file("examples/report.csv", dst, on_progress=on_progress)
            print(f"downloaded {written} bytes to {dst}")

        header = client.download_as_string("examples/report.csv", byte_range=ByteRange(0, 7))
        print("first bytes:", repr(header))
        client.delete("examples/report.csv")


async def async_bytes(conn_str: str, container: str) -> None:
    options = ClientOptions(create_container_if_not_exists=True)
    async with AsyncBlobClient(conn_str, container, options) as client:
        payload = os.urandom(256 * 1024)
        await client.upload_from_bytes("examples/random.bin", payload, on_progress=on_progress_async)

        data = await client.download_as_bytes("examples/random.bin", on_progress=on_progress_async)
        print("round trip ok:", data == payload)
        await client.delete("examples/random.bin")


def main() -> None:
    conn_str = os.getenv("AZURE_STORAGE_CONNECTION_STRING", "UseDevelopmentStorage=true")
    container = os.getenv("AZURE_STORAGE_CONTAINER_NAME", "examples")

    sync_files(conn_str, container)
    asyncio.run(async_bytes(conn_str, container))


if __name__ == "__main__":
    main()
