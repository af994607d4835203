import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "py" / "src"))

from saferoute import (  # noqa: E402
    AppError,
    app_error_translator,
    create_test_env,
    json,
    response_json,
)


class OrgParams(BaseModel):
    org: str = Field(min_length=1)


class ProjectParams(BaseModel):
    project: str = Field(pattern=r"^[a-z0-9-]+$")


class Access(BaseModel):
    role: Literal["reader", "writer"]


class Rename(BaseModel):
    name: str


def main() -> None:
    env = create_test_env()
    env.ids.push("req-1")

    async def require_role(args, next_):
        granted = [r.strip() for r in args.request.header("x-roles").split(",") if r.strip()]
        if args.metadata is not None and args.metadata.role not in granted:
            return json(403, {"message": "forbidden"})
        return await next_(ctx={"roles": granted})

    org_routes = env.route(error_translator=app_error_translator).params(OrgParams)
    project_routes = (
        org_routes.params(ProjectParams, extend=True)
        .define_metadata(Access)
        .use(env.request_id())
        .use(env.request_logging())
        .use(require_role)
    )

    def rename(_req, args):
        if args.params.project == "locked":
            raise AppError("app.conflict", "project is locked")
        return {
            "org": args.params.org,
            "project": args.params.project,
            "name": args.body.name,
            "request_id": args.get("request_id"),
        }

    patch = project_routes.metadata({"role": "writer"}).body(Rename).handler(rename)

    resp = env.invoke(
        patch,
        env.request("PATCH", "/orgs/acme/projects/rocket", headers={"x-roles": "writer"}, json_body={"name": "Rocket"}),
        params={"org": "acme", "project": "rocket"},
    )
    assert resp.status == 200
    assert resp.headers["x-request-id"] == ["req-1"]
    assert response_json(resp) == {"org": "acme", "project": "rocket", "name": "Rocket", "request_id": "req-1"}

    denied = env.invoke(
        patch,
        env.request("PATCH", "/orgs/acme/projects/rocket", headers={"x-roles": "reader"}, json_body={"name": "x"}),
        params={"org": "acme", "project": "rocket"},
    )
    assert denied.status == 403

    invalid = env.invoke(patch, env.request("PATCH", "/", json_body={"name": "x"}), params={"org": "acme", "project": "No!"})
    assert invalid.status == 400
    assert response_json(invalid)["message"] == "Invalid params"

    locked = env.invoke(
        patch,
        env.request("PATCH", "/", headers={"x-roles": "writer"}, json_body={"name": "x"}),
        params={"org": "acme", "project": "locked"},
    )
    assert locked.status == 409
    assert env.logger.messages("warn").count("request.completed") == 2

    print("examples/testkit/py.py: PASS")


if __name__ == "__main__":
    main()
