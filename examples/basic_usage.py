import os

from dotenv import load_dotenv

from simple_storage.blob import BlobClient, BlobNotFoundError, ClientOptions

load_dotenv()


def main() -> None:
    conn_str = os.getenv("AZURE_STORAGE_CONNECTION_STRING", "UseDevelopmentStorage=true")
    container = os.getenv("AZURE_STORAGE_CONTAINER_NAME", "examples")

    with BlobClient(conn_str, container, ClientOptions(create_container_if_not_exists=True)) as client:
        # 1) Strings and JSON
        client.upload_from_string("examples/hello.txt", "Hello, World!")
        print("text:", client.download_as_string("examples/hello.txt"))

        client.upload_json("examples/config.json", {"debug": True, "retries": 3})
        print("json:", client.download_as_json("examples/config.json"))

        # 2) Existence and metadata
        print("exists:", client.exists("examples/hello.txt"))
        client.set_metadata("examples/hello.txt", {"author": "examples"})
        meta = client.get_metadata("examples/hello.txt")
        print(f"metadata: {meta.content_type}, {meta.content_length} bytes, {meta.metadata}")

        # 3) Listing
        for item in client.list_blobs("examples/", max_results=10):
            print(f"  - {item.name} ({item.size} bytes)")

        # 4) Cleanup
        client.delete("examples/hello.txt")
        client.delete("examples/config.json")

        try:
            client.download_as_string("examples/hello.txt")
        except BlobNotFoundError as exc:
            print("after delete:", exc.code)


if __name__ == "__main__":
    main()
