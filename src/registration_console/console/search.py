from registration_console.models.base import QueryKey

USERS_KEY: QueryKey = ("users",)
SEARCH_PREFIX: QueryKey = ("users", "search")


def search_key(term: str) -> QueryKey:
    return SEARCH_PREFIX + (term,)


class SearchController:
    """Separates what is typed in the search box from what is queried.

    ``input_value`` follows every keystroke; ``term`` only changes when the
    search is explicitly triggered.
    """

    def __init__(self):
        self.input_value = ""
        self.term = ""

    @property
    def query_key(self) -> QueryKey:
        return search_key(self.term)

    def type(self, value: str) -> None:
        self.input_value = value or ""

    def commit(self) -> bool:
        """Copies the typed value into the committed term.

        Returns:
            True if the committed term changed.
        """
        changed = self.input_value != self.term
        self.term = self.input_value
        return changed
