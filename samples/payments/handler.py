import json

from utils import get_version


def handler(event, context):
    print(f"Payments Version: {get_version()}")
    return {"statusCode": 200, "body": json.dumps({"status": "Payments Success"})}
