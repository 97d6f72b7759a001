#!/usr/bin/env python3
"""
Basic usage examples for the CloudQuery Python client library.

This script demonstrates how to sign requests and manage indexes and
documents on a CloudQuery service.

Credentials come from the environment:
    CLOUDQUERY_ACCOUNT and either CLOUDQUERY_SECRET or CLOUDQUERY_PASSWORD
"""

import logging
import os
import sys

from cloudquery import (
    Client,
    ClientConfig,
    CloudqueryError,
    Request,
    build_signed_url,
    sign,
    nonce
)


def main(account, secret, config):
    """Run basic usage examples."""

    print("=== CloudQuery Python Client Basic Usage Examples ===\n")

    # Example 1: Signing primitives
    print("1. Signing primitives...")
    print(f"   Nonce: {nonce()}")
    print(f"   Signature of 'secret' + '/v0/i': {sign('secret', '/v0/i')}")
    print()

    # Example 2: Building a signed URL without sending it
    print("2. Building a signed URL...")
    request = Request(
        method='GET',
        path=f"{config.path}/i",
        params={'limit': '10'},
        scheme=config.scheme,
        host=config.host,
        port=config.port,
        account=account,
        secret=secret,
    )
    print(f"   {build_signed_url(request)}")
    print()

    client = Client(account, secret, config=config)
    index = "examples"

    try:
        # Example 3: Account information
        print("3. Fetching account information...")
        response = client.get_account()
        if response['STATUS'] == 200:
            print(f"   ✓ Account: {response['result'].get('name')}")
        else:
            print(f"   ✗ Account lookup failed: {response['REASON']}")
        print()

        # Example 4: Index management
        print("4. Creating an index...")
        response = client.add_indexes(index)
        print(f"   Status: {response['STATUS']}")
        print(f"   Indexes: {client.get_indexes().get('result')}")
        print()

        # Example 5: Document management
        print("5. Adding documents...")
        docs = [
            {"title": "Hello from Python", "kind": "example"},
            {"title": "Second document", "kind": "example"},
        ]
        response = client.add_documents(index, docs)
        print(f"   Status: {response['STATUS']}")

        print("   Counting documents...")
        print(f"   Count: {client.count_documents(index, '*').get('result')}")

        print("   Querying documents...")
        response = client.get_documents(index, "*", {"fields": ["title"], "limit": 5})
        print(f"   Result: {response.get('result')}")
        print()

        # Example 6: Clean up
        print("6. Removing documents and index...")
        client.delete_documents(index, "*")
        response = client.delete_indexes(index)
        print(f"   Status: {response['STATUS']}")
        print()

        # Example 7: Error handling demonstration
        print("7. Demonstrating error handling...")
        with Client(account, "wrong-secret", config=config) as wrong_client:
            response = wrong_client.get_account()
        if response['STATUS'] in (401, 403):
            print(f"   ✓ Correctly rejected wrong secret ({response['REASON']})")
        else:
            print(f"   ✗ Unexpected response: {response['STATUS']}")
        print()

        print("=== All Examples Completed Successfully! ===")

    except CloudqueryError as e:
        print(f"CloudQuery Client Error: {e}")
        sys.exit(1)
    finally:
        client.close()


def demonstrate_configuration():
    """Demonstrate client configuration options."""

    print("\n=== Configuration Options Example ===")

    with Client("account", "secret", host="localhost", secure=False, port=8080, timeout=60) as client:
        print("✓ Client configured with:")
        print(f"  - Base URL: {client.config.scheme}://{client.config.host}:{client.config.effective_port}")
        print(f"  - Base path: {client.config.path}")
        print(f"  - HTTP timeout: {client.config.timeout} seconds")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG if os.environ.get("CLOUDQUERY_DEBUG") else logging.INFO)

    config = ClientConfig.from_env()
    account = os.environ.get("CLOUDQUERY_ACCOUNT")
    secret = os.environ.get("CLOUDQUERY_SECRET")

    if not account:
        print("Set CLOUDQUERY_ACCOUNT (and CLOUDQUERY_SECRET or CLOUDQUERY_PASSWORD) first.")
        sys.exit(1)

    if not secret:
        password = os.environ.get("CLOUDQUERY_PASSWORD")
        if not password:
            print("Set CLOUDQUERY_SECRET or CLOUDQUERY_PASSWORD.")
            sys.exit(1)
        try:
            secret = Client.get_secret(account, password, config)
        except CloudqueryError as e:
            print(f"Could not fetch secret: {e}")
            sys.exit(1)

    main(account, secret, config)
    demonstrate_configuration()
