# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
import sys
import uuid
from bucketfs.client import InMemoryObjectStore
from bucketfs.fs import BucketFs

def make_store():
    # Pass a bucket name to run against Google Cloud Storage
    if len(sys.argv) > 1:
        from bucketfs.client.gcs import GCSObjectStore
        return GCSObjectStore(sys.argv[1])
    return InMemoryObjectStore()

def main():
    fs = BucketFs(make_store())

    try:
        folder = f"example-{uuid.uuid4()}"

        # Write a file; it is uploaded when the session closes
        with fs.create(f"{folder}/hello.txt") as f:
            f.write(b"Hello, World!")
        print(f"Wrote {folder}/hello.txt")

        # File metadata
        info = fs.stat(f"{folder}/hello.txt")
        print(f"Size: {info.size} bytes, modified: {info.mod_time}, directory: {info.is_dir}")

        # Read it back, with seeking
        with fs.open(f"{folder}/hello.txt") as f:
            f.seek(7)
            print(f"Read from offset 7: {f.read().decode()}")

        # A path with no object is a directory of the objects under it
        for i in range(3):
            with fs.create(f"{folder}/logs/{i}.log") as f:
                f.write(f"entry {i}\n".encode())
        directory = fs.open(f"{folder}/logs")
        while True:
            names = directory.readdirnames(2)
            if not names:
                break
            print(f"Page: {names}")

        # Clean up
        for name in fs.open(folder).readdirnames():
            fs.remove(name)
        print(f"Removed everything under {folder}")

    finally:
        fs.close()

if __name__ == "__main__":
    main()
