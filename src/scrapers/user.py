"""Answer authors."""

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """An identified zhihu user."""

    link: str
    id: str

    @property
    def is_anonymous(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"<User: {self.id} - {self.link}>"


class AnonymousUser:
    """Author of answers posted anonymously.

    There is exactly one instance, ``ANONYMOUS``; compare with ``is``.
    """

    _instance = None

    link = ""
    id = "匿名用户"
    is_anonymous = True

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (AnonymousUser, ())

    def __repr__(self) -> str:
        return "ANONYMOUS"

    def __str__(self) -> str:
        return "<User: Anonymous>"


ANONYMOUS = AnonymousUser()
