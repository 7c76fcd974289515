from __future__ import annotations
import requests
from typing import List, Dict, Any, Iterable, Optional
from core.config import REQUEST_TIMEOUT
from core.exceptions import VikunjaError
from core.logs import get_logger

log = get_logger("storage.vikunja")


class VikunjaClient:
    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/api/v1"
        self.session = requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = ""
        if token:
            self.set_token(token)

    def _call(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.api_url}{path}"
        log.debug("%s %s", method, url)
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise VikunjaError(f"{method} {path} failed: {e}") from e
        if not r.ok:
            raise VikunjaError(f"{method} {path}: {r.status_code} {r.text}", status_code=r.status_code)
        if not r.content:
            return None
        return r.json()

    # ---------- auth ----------
    def set_token(self, token: str):
        self.token = token
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def login(self, username: str, password: str) -> bool:
        data = self._call("POST", "/login", json={"username": username, "password": password, "long_token": True})
        token = (data or {}).get("token")
        if not token:
            raise VikunjaError("Missing token in login response")
        self.set_token(token)
        return True

    def get_user(self) -> Dict[str, Any]:
        return self._call("GET", "/user")

    # ---------- projects ----------
    def list_projects(self) -> List[Dict[str, Any]]:
        return self._call("GET", "/projects", params={"per_page": 200}) or []

    # ---------- tasks ----------
    def list_tasks_by_ids(self, task_ids: Iterable[int]) -> List[Dict[str, Any]]:
        filt = "id in " + ",".join(str(i) for i in task_ids)
        return self._call("GET", "/tasks/all", params={"filter": filt}) or []

    def list_project_tasks(self, project_id: int, per_page: int = 50) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = self._call("GET", "/tasks/all", params={
                "filter": f"project = {project_id}",
                "sort_by": "position",
                "page": page,
                "per_page": per_page,
            }) or []
            items.extend(batch)
            if len(batch) < per_page:
                return items
            page += 1

    def create_task(self, project_id: int, title: str, **fields) -> Dict[str, Any]:
        payload = {"title": title, "project_id": project_id, **fields}
        return self._call("PUT", f"/projects/{project_id}/tasks", json=payload)

    def update_task(self, task_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("POST", f"/tasks/{task_id}", json=fields)

    def bulk_update(self, task_ids: List[int], fields: Dict[str, Any]) -> Any:
        return self._call("POST", "/tasks/bulk", json={**fields, "task_ids": list(task_ids)})

    # ---------- relations ----------
    def add_relation(self, task_id: int, other_task_id: int, kind: str = "parenttask") -> Any:
        return self._call("PUT", f"/tasks/{task_id}/relations",
                          json={"relation_kind": kind, "other_task_id": other_task_id})

    def remove_relation(self, task_id: int, other_task_id: int, kind: str = "parenttask") -> Any:
        return self._call("DELETE", f"/tasks/{task_id}/relations/{kind}/{other_task_id}")
