def details(name: str = "Alice", **kwargs) -> dict:
    data = {"name": name, "phone": "(11) 99999-9999"}
    data.update(kwargs)
    return data


def registration_payload(name: str, email: str, **kwargs) -> dict:
    return {"email": email, **details(name, **kwargs)}
