# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved
'''
This example demonstrates how to read and write files in a bucket mounted with bucketfs.

Setup:
    # Install the package
    pip install bucketfs

    # Install FUSE on your system
    # On Ubuntu/Debian:
    sudo apt-get install fuse

    # Configure Google Cloud credentials
    export GOOGLE_APPLICATION_CREDENTIALS=/path/to/service-account.json

    # Create a mount point and mount the bucket
    mkdir -p /mnt/my-bucket
    python -m bucketfs.fs my-bucket /mnt/my-bucket

Usage:
    python fuse_operations.py /mnt/my-bucket

Troubleshooting:
    # Enable debug logging and operation tracing
    export BUCKETFS_LOG_LEVEL=DEBUG
    python -m bucketfs.fs my-bucket /mnt/my-bucket --trace

    # Unmount when done
    fusermount -u /mnt/my-bucket
'''
import sys
import os

def main():
    if len(sys.argv) != 2:
        print("Usage: python fuse_operations.py <mountpoint>")
        sys.exit(1)

    mountpoint = sys.argv[1]
    example_file = os.path.join(mountpoint, "example.txt")

    # Write to a file; it is uploaded when closed
    with open(example_file, 'w') as f:
        f.write("Hello FUSE")
    print(f"File created and written: {example_file}")

    # Read from the file
    with open(example_file, 'r') as f:
        content = f.read()
    print(f"Content read from file: {content}")

    # Directories are synthesized from object name prefixes
    print(f"Mount contents: {os.listdir(mountpoint)}")

    # Delete the file
    os.remove(example_file)
    print(f"File removed: {example_file}")

if __name__ == '__main__':
    main()
