"""Example: use the service layer directly (no Flask).

Controllers are a thin layer; scheduling rules live in the services.
"""

from datetime import date

from config import load_settings

from src.workboard.workboard.container import build_container
from src.workboard.workboard.core.enums import Role
from src.workboard.workboard.core.viewer import Viewer


def main():
    settings = load_settings()
    container = build_container(db_config=settings.DB_CONFIG)

    today = date.today()
    for s in container.obligation_service.list_obligations(reference_date=today, include_paused=False):
        print(f"{s.obligation.title}: next due {s.next_occurrence:%Y-%m-%d}")

        matrix = container.completion_service.get_completion_matrix(
            s.obligation.obligation_id,
            Viewer(viewer_id="admin", role=Role.ADMIN),
        )
        print(f"  {matrix.stats.completed}/{matrix.stats.total} done ({matrix.stats.percentage}%)")


if __name__ == "__main__":
    main()
