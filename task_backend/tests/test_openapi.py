import json

from fastapi.testclient import TestClient

from task_api.generate_openapi import generate_openapi, main


class TestOpenAPIDocument:
    def test_served_at_openapi_json(self, client: TestClient):
        res = client.get("/openapi.json")
        assert res.status_code == 200
        doc = res.json()
        assert doc["openapi"].startswith("3.")
        assert doc["info"]["title"] == "Task API"

        paths = doc["paths"]
        assert set(paths["/api/tasks"]) == {"get", "post"}
        assert set(paths["/api/tasks/{task_id}"]) == {"get", "put", "delete"}
        assert "/" in paths

    def test_documents_error_responses(self, client: TestClient):
        doc = client.get("/openapi.json").json()
        item = doc["paths"]["/api/tasks/{task_id}"]
        for method in ("get", "put", "delete"):
            assert {"200", "400", "404"} <= set(item[method]["responses"])
        assert "400" in doc["paths"]["/api/tasks"]["post"]["responses"]

    def test_no_422_responses_are_documented(self, client: TestClient):
        doc = client.get("/openapi.json").json()
        for path, item in doc["paths"].items():
            for method, operation in item.items():
                assert "422" not in operation["responses"], (path, method)
        schemas = doc["components"]["schemas"]
        assert "HTTPValidationError" not in schemas
        assert "ValidationErrorResponse" in schemas

    def test_task_id_parameter_is_digits_only(self, client: TestClient):
        params = client.get("/openapi.json").json()["paths"]["/api/tasks/{task_id}"]["get"]["parameters"]
        task_id = next(p for p in params if p["name"] == "task_id")
        assert task_id["in"] == "path"
        assert task_id["schema"]["pattern"] == r"^(0|[1-9][0-9]{0,9})$"

    def test_task_schema_uses_camel_case(self, client: TestClient):
        schemas = client.get("/openapi.json").json()["components"]["schemas"]
        task_schema = next(s for name, s in schemas.items() if name.startswith("TaskOut"))
        assert {"createdAt", "updatedAt"} <= set(task_schema["properties"])
        assert "TaskCreate" in schemas
        assert "TaskUpdate" in schemas


class TestGenerateOpenAPI:
    def test_writes_schema_file(self, tmp_path):
        out = tmp_path / "interfaces" / "openapi.json"
        written = generate_openapi(str(out))
        assert written == str(out)

        doc = json.loads(out.read_text(encoding="utf-8"))
        assert "/api/tasks" in doc["paths"]
        assert {t["name"] for t in doc["tags"]} >= {"root", "tasks"}

    def test_main_accepts_output_argument(self, tmp_path, capsys):
        out = tmp_path / "openapi-out.json"
        main([str(out)])
        assert out.exists()
        assert str(out) in capsys.readouterr().out
