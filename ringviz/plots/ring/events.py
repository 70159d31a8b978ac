# Plot-level event names accepted in options["events"] -> engine event names.
RING_EVENTS = {
    "on_ring_click": "interval:click",
    "on_ring_dblclick": "interval:dblclick",
    "on_ring_mousemove": "interval:mousemove",
    "on_ring_mouseenter": "interval:mouseenter",
    "on_ring_mouseleave": "interval:mouseleave",
    "on_ring_contextmenu": "interval:contextmenu",
}

HOVER_ENTER = RING_EVENTS["on_ring_mouseenter"]
HOVER_LEAVE = RING_EVENTS["on_ring_mouseleave"]
