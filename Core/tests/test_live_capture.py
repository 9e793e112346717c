from __future__ import annotations

from urllib.parse import quote

import pytest
from selenium.webdriver.common.by import By

from tests.helpers import managed_runtime, require_browser_opt_in

PRESS_PAGE = """<!DOCTYPE html>
<html><head><style>
  .cta { transform: scale(1); opacity: 1; }
  .cta.pressed { transform: scale(0.95); opacity: 0.8; }
</style></head>
<body>
  <button class="cta" onclick="this.classList.add('pressed')">Buy</button>
  <ul id="feed"></ul>
  <script>
    document.querySelector(".cta").addEventListener("click", () => {
      document.getElementById("feed").appendChild(document.createElement("li"));
    });
  </script>
</body></html>
"""


@pytest.mark.integration
def test_click_on_live_page_yields_profile(capture_config, tmp_path):
    require_browser_opt_in()

    with managed_runtime(capture_config, tmp_path / "captures") as runtime:
        runtime.driver.get("data:text/html;charset=utf-8," + quote(PRESS_PAGE))
        runtime.recorder.start()
        runtime.driver.find_element(By.CSS_SELECTOR, "button.cta").click()
        runtime.recorder.wait_for_interactions(2, timeout=2)
        profiles = runtime.recorder.stop()

    clicks = [record for record in runtime.session.records if record.event_kind == "click"]
    assert clicks[0].selector == "button.cta"
    click_profiles = [profile for profile in profiles if profile.trigger.event_kind == "click"]
    assert click_profiles[0].name == "click-on-cta"
    assert "transform" in click_profiles[0].effect.properties
    assert runtime.session.intents
    assert runtime.writer.profiles_path.exists()
