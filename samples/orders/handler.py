def handler(event, context):
    print(f"Orders request {context.aws_request_id}")
    return {"statusCode": 200, "body": "Orders Success"}
