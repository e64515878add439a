"""Subject references for packages in the backlink index."""

DEFAULT_SUBJECT_BASE_URL = "https://npmx.dev/package"


class SubjectRefBuilder:
    """Maps package names to the subject reference used by like records."""

    def __init__(self, base_url: str = DEFAULT_SUBJECT_BASE_URL):
        self.base_url = base_url.rstrip("/")

    def __call__(self, package_name: str) -> str:
        # Names are appended verbatim so distinct names never share a reference
        return f"{self.base_url}/{package_name}"


package_subject_ref = SubjectRefBuilder()
