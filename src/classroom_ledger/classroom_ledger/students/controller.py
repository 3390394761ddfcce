from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.student_service

    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    def list_students():
        term = request.args.get("q", "")
        students = service.search_students(term) if term else service.list_students()
        return jsonify({"success": True, "students": [s.to_dict() for s in students]})

    @app.route("/api/students", methods=["POST"], endpoint="add_student")
    def add_student():
        data = json_body()
        student = service.add_student(
            name=data.get("name", ""),
            class_label=data.get("class", ""),
            mobile=data.get("mobile"),
        )
        return jsonify({"success": True, "message": "Student added", "student": student.to_dict()}), 201

    @app.route("/api/students/<student_id>", methods=["GET"], endpoint="get_student")
    def get_student(student_id: str):
        return jsonify({"success": True, "student": service.get_student(student_id).to_dict()})

    @app.route("/api/students/<student_id>", methods=["PUT"], endpoint="update_student")
    def update_student(student_id: str):
        data = json_body()
        student = service.update_student(
            student_id,
            name=data.get("name", ""),
            class_label=data.get("class", ""),
            mobile=data.get("mobile"),
        )
        return jsonify({"success": True, "message": "Student updated", "student": student.to_dict()})

    @app.route("/api/students/<student_id>", methods=["DELETE"], endpoint="delete_student")
    def delete_student(student_id: str):
        service.delete_student(student_id)
        return jsonify({"success": True, "message": "Student deleted"})
