# scripts/send_test_message.py
import argparse

from rollcall.services.webhook_client import get_webhook_client


def main():
    parser = argparse.ArgumentParser(description="Post a message to the configured chat webhook")
    parser.add_argument("message", nargs="?", default="Rollcall webhook test")
    args = parser.parse_args()

    client = get_webhook_client()
    status = client.send_message(args.message)
    print("Status:", status)


if __name__ == "__main__":
    main()
