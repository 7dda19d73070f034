def get_version():
    return "1.0.0"
