import sys
from pathlib import Path
from html.parser import HTMLParser

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from skistandings import create_app  # type: ignore  # noqa: E402


class TableGrabber(HTMLParser):
    """Collect the header cells and first body row of the first results table."""

    def __init__(self):
        super().__init__()
        self.in_table = False
        self.in_thead = False
        self.in_tbody = False
        self.in_th = False
        self.in_td = False
        self.done = False
        self.headers = []
        self.first_row = []
        self.current_row = []
        self._buf = []

    def handle_starttag(self, tag, attrs):
        if tag == 'table' and not self.done:
            classes = dict(attrs).get('class') or ''
            self.in_table = 'results-table' in classes
        elif self.in_table and tag == 'thead':
            self.in_thead = True
        elif self.in_table and tag == 'tbody':
            self.in_tbody = True
        elif self.in_thead and tag == 'th':
            self.in_th = True
            self._buf = []
        elif self.in_tbody and not self.first_row and tag == 'td':
            self.in_td = True
            self._buf = []

    def handle_endtag(self, tag):
        if tag == 'table' and self.in_table:
            self.in_table = False
            self.done = True
        elif tag == 'thead' and self.in_thead:
            self.in_thead = False
        elif tag == 'tbody' and self.in_tbody:
            self.in_tbody = False
        elif tag == 'th' and self.in_th:
            self.headers.append(''.join(self._buf).strip())
            self.in_th = False
        elif tag == 'td' and self.in_td:
            self.current_row.append(' '.join(''.join(self._buf).split()))
            self.in_td = False
        elif tag == 'tr' and self.in_tbody and not self.first_row and self.current_row:
            self.first_row = self.current_row
            self.current_row = []

    def handle_data(self, data):
        if self.in_th or self.in_td:
            self._buf.append(data)


def main():
    data_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else REPO_ROOT / "data"
    app = create_app(data_dir=data_dir)
    app.config.update({"TESTING": True})
    with app.test_client() as c:
        res = c.get("/events/0?gender=M")
        if res.status_code != 200:
            print(f"Event page returned {res.status_code}")
            return 1
        html = res.get_data(as_text=True)

    parser = TableGrabber()
    parser.feed(html)
    headers = parser.headers
    print("Headers:", " | ".join(headers))
    print("First row:", " | ".join(parser.first_row))
    try:
        ti = headers.index("Total")
        bi = headers.index("Behind")
        assert bi == ti + 1
        print("OK: Behind immediately follows Total")
    except (ValueError, AssertionError) as e:
        print("Order check failed:", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
