from __future__ import annotations

import logging

from selenium.common.exceptions import WebDriverException

log = logging.getLogger(__name__)

INTERACTION_BUFFER = "__anim_interactions__"
MUTATION_BUFFER = "__anim_mutations__"
NETWORK_BUFFER = "__anim_network__"

# The page side only gathers raw data. Selectors, filtering, diffing and
# classification all run in Python on the flushed buffers.
INSTALL_MONITOR_SCRIPT = r"""
const settleDelayMs = arguments[0];
const styleProperties = arguments[1];

if (!window.__anim_interactions__) window.__anim_interactions__ = [];
if (!window.__anim_mutations__) window.__anim_mutations__ = [];
if (!window.__anim_network__) window.__anim_network__ = [];

if (!window.__anim_monitor_installed__) {
  const targetIds = new WeakMap();
  let nextTargetId = 1;
  let nextBatch = 1;
  let nextSeq = 1;

  const targetId = (node) => {
    if (!targetIds.has(node)) targetIds.set(node, nextTargetId++);
    return targetIds.get(node);
  };

  const rawState = (node) => {
    const attributes = {};
    for (const attr of node.attributes) attributes[attr.name] = attr.value;
    let text = "";
    for (const child of node.childNodes) {
      if (child.nodeType === Node.TEXT_NODE) text += child.textContent || "";
    }
    const computed = window.getComputedStyle(node);
    const styles = {};
    for (const prop of styleProperties) {
      const value = computed.getPropertyValue(prop);
      if (value) styles[prop] = value;
    }
    return {
      tag: node.tagName.toLowerCase(),
      attributes,
      classes: Array.from(node.classList),
      html: node.outerHTML,
      text,
      styles,
    };
  };

  const pushCapped = (name, item, cap) => {
    item.seq = nextSeq++;
    window[name].push(item);
    if (window[name].length > cap) window[name] = window[name].slice(-cap);
  };

  const handleInteraction = (event, kind) => {
    const target = event.target;
    if (!window.__anim_monitor_recording__ || !(target instanceof HTMLElement)) return;
    const before = rawState(target);
    const ts = Date.now();
    requestAnimationFrame(() => {
      setTimeout(() => {
        pushCapped("__anim_interactions__", {
          ts,
          kind,
          x: typeof event.clientX === "number" ? event.clientX : null,
          y: typeof event.clientY === "number" ? event.clientY : null,
          value: typeof target.value === "string" ? target.value : null,
          key: event.key || null,
          target,
          targetId: targetId(target),
          before,
          after: rawState(target),
        }, 200);
      }, settleDelayMs);
    });
  };

  for (const kind of ["click", "submit", "input", "focus", "change"]) {
    document.addEventListener(kind, (event) => handleInteraction(event, kind), true);
  }

  let lastHover = 0;
  document.addEventListener("mouseover", (event) => {
    const now = Date.now();
    if (now - lastHover < 200) return;
    lastHover = now;
    if (event.target instanceof HTMLElement && event.target.matches('a, button, [role="button"]')) {
      handleInteraction(event, "hover");
    }
  }, true);

  window.__anim_observer__ = new MutationObserver((mutations) => {
    if (!window.__anim_monitor_recording__) return;
    const batch = nextBatch++;
    const ts = Date.now();
    for (const mutation of mutations) {
      if (!(mutation.target instanceof Element)) continue;
      pushCapped("__anim_mutations__", {
        batch,
        timestamp: ts,
        type: mutation.type,
        target: mutation.target,
        targetId: targetId(mutation.target),
        targetTag: mutation.target.tagName.toLowerCase(),
        attributeName: mutation.attributeName || "",
        oldValue: mutation.oldValue,
        addedCount: mutation.addedNodes ? mutation.addedNodes.length : 0,
        removedCount: mutation.removedNodes ? mutation.removedNodes.length : 0,
      }, 1000);
    }
  });

  const pushRequest = (method, url, status, started) => {
    if (!window.__anim_monitor_recording__) return;
    pushCapped("__anim_network__", {
      ts: Date.now(),
      url: String(url),
      method: String(method || "GET").toUpperCase(),
      status,
      timing: Date.now() - started,
    }, 200);
  };

  if (window.fetch) {
    const originalFetch = window.fetch;
    window.fetch = function (input, init) {
      const started = Date.now();
      const url = typeof input === "string" ? input : (input && input.url) || String(input);
      const method = (init && init.method) || (input && input.method) || "GET";
      return originalFetch.apply(this, arguments).then((response) => {
        pushRequest(method, response.url || url, response.status, started);
        return response;
      });
    };
  }

  const originalOpen = XMLHttpRequest.prototype.open;
  const originalSend = XMLHttpRequest.prototype.send;
  XMLHttpRequest.prototype.open = function (method, url) {
    this.__anim_request__ = { method, url };
    return originalOpen.apply(this, arguments);
  };
  XMLHttpRequest.prototype.send = function () {
    const request = this.__anim_request__;
    if (request) {
      const started = Date.now();
      this.addEventListener("loadend", () => {
        pushRequest(request.method, this.responseURL || request.url, this.status, started);
      });
    }
    return originalSend.apply(this, arguments);
  };

  window.__anim_monitor_installed__ = true;
}
"""

# Runs on every install. Observing the same root again only replaces the
# options, so this also reconnects an observer that an earlier stop disconnected.
CONNECT_OBSERVER_SCRIPT = """
window.__anim_observer__.observe(document.body || document.documentElement, {
  childList: true,
  attributes: true,
  attributeOldValue: true,
  subtree: true,
  attributeFilter: ["class", "style", "hidden", "disabled", "aria-expanded", "aria-hidden"],
});
window.__anim_monitor_recording__ = true;
"""

# Detached elements cannot be returned over WebDriver, so their references
# are replaced with null. The buffer is left intact until the host drops it.
READ_BUFFER_SCRIPT = """
const items = window[arguments[0]] || [];
return items.map((item) => {
  if (!item.target || item.target.isConnected) return item;
  return Object.assign({}, item, { target: null });
});
"""

DROP_BUFFER_SCRIPT = """
const name = arguments[0];
const lastSeq = arguments[1];
window[name] = (window[name] || []).filter((item) => item.seq > lastSeq);
"""

UNINSTALL_MONITOR_SCRIPT = """
window.__anim_monitor_recording__ = false;
if (window.__anim_observer__) window.__anim_observer__.disconnect();
"""


class DomMonitor:
    """Installs and reads the browser-side interaction, mutation and network buffers."""

    def __init__(self, settle_delay_ms: int = 50, style_properties: list[str] | None = None) -> None:
        self.settle_delay_ms = settle_delay_ms
        self.style_properties = list(style_properties or [])

    def install(self, driver) -> None:
        driver.execute_script(INSTALL_MONITOR_SCRIPT, self.settle_delay_ms, self.style_properties)
        driver.execute_script(CONNECT_OBSERVER_SCRIPT)
        log.info("Capture monitor installed (settle delay %d ms)", self.settle_delay_ms)

    def flush_interactions(self, driver) -> list[dict]:
        return self._flush(driver, INTERACTION_BUFFER)

    def flush_mutations(self, driver) -> list[dict]:
        return self._flush(driver, MUTATION_BUFFER)

    def flush_network(self, driver) -> list[dict]:
        return self._flush(driver, NETWORK_BUFFER)

    def uninstall(self, driver) -> None:
        try:
            driver.execute_script(UNINSTALL_MONITOR_SCRIPT)
        except WebDriverException as exc:
            log.warning("Could not stop the capture monitor: %s", exc)

    @staticmethod
    def _flush(driver, buffer: str) -> list[dict]:
        try:
            items = driver.execute_script(READ_BUFFER_SCRIPT, buffer) or []
        except WebDriverException as exc:
            log.warning("Capture buffer %s could not be read: %s", buffer, exc)
            return []
        if items:
            try:
                driver.execute_script(DROP_BUFFER_SCRIPT, buffer, items[-1].get("seq", 0))
            except WebDriverException as exc:
                log.warning("Capture buffer %s could not be cleared: %s", buffer, exc)
        return items
