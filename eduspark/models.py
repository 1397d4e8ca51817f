"""Central import point for every ORM model so metadata is complete before create_all."""


def register_models() -> None:
    """Import all model modules, registering their tables on ``Base.metadata``."""
    from eduspark.assignments import models as assignment_models  # noqa: F401
    from eduspark.challenges import models as challenge_models  # noqa: F401
    from eduspark.courses import models as course_models  # noqa: F401
    from eduspark.progress import models as progress_models  # noqa: F401
    from eduspark.users import models as user_models  # noqa: F401
