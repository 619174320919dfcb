import pytest


SCHEDULE_TABLE = """
<table class="schedule-table"><tbody>
<tr>
    <th class="schedule-filler" rowspan="2"></th>
    <th colspan="2">Hynes</th>
    <th class="schedule-filler"></th>
    <th>Sheraton</th>
</tr>
<tr>
    <th>Hall A</th><th>Hall B</th><th class="schedule-filler"></th><th>Republic</th>
</tr>
<tr>
    <th class="schedule-time">10:00 am</th>
    <td title="Opening Ceremonies" colspan="2" rowspan="2"
        onclick="location.href='/schedule/event/1'">Opening Cer...</td>
    <td class="schedule-filler"></td>
    <td></td>
</tr>
<tr>
    <th class="schedule-time">10:15 am</th>
    <td class="schedule-filler"></td>
    <td title="Cosplay 101" rowspan="2"
        onclick="location.href='/schedule/event/2'">Cosplay 101</td>
</tr>
<tr>
    <th class="schedule-time">10:30 am</th>
    <td></td>
    <td title="Panel Y" onclick="location.href='/schedule/event/3'">Panel Y</td>
    <td class="schedule-filler"></td>
</tr>
<tr>
    <th class="schedule-filler" rowspan="2"></th>
    <th colspan="2">Hynes</th>
    <th class="schedule-filler"></th>
    <th>Sheraton</th>
</tr>
<tr>
    <th>Hall A</th><th>Hall B</th><th class="schedule-filler"></th><th>Republic</th>
</tr>
</tbody></table>
"""

BASE_URL = "https://www.animeboston.com/schedule/index/2024"


def make_page(*tables: str) -> str:
    return "<html><body>" + "".join(tables) + "</body></html>"


@pytest.fixture
def schedule_page() -> str:
    """A one-day schedule page: 3 time rows, 4 columns (one spacer), 3 events."""
    return make_page(SCHEDULE_TABLE)
