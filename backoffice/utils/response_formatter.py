from flask import jsonify

def success_response(payload=None, message=None, status=200):
    resp = {"status": True}
    if payload is not None:
        resp["data"] = payload
    if message:
        resp["message"] = message
    return jsonify(resp), status

def error_response(code, message, details=None, status=400):
    err = {
        "status": False,
        "code": code,
        "message": message,
        "errors": details or {}
    }
    return jsonify(err), status
