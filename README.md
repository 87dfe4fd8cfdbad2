# apextux

Render useful things for the 128x40 monochrome OLED screen of SteelSeries
Apex keyboards: a clock, the Bitcoin price, system statistics and still or
animated images. The frames are shown in a simulator window that mimics
the screen.

Content comes from *providers*. A scheduler shows one provider at a time,
switches to the next or previous one on command, cycles through them
automatically and can interrupt them for notifications.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running

```
apextux
```

This opens a simulator window that shows the screen scaled up four times.
Use the left and right arrow keys to switch between providers; closing the
window shuts everything down. Ctrl+C in the terminal does the same where
the platform lets the event loop catch the signal.

Options:

- `--scale N` sets the simulator window scale (default 4, at least 1).
- `--debug` adds the `dummy` provider, a moving cross-hair for testing.

## Providers

| Name       | Module                         | Shows                                                     |
|------------|--------------------------------|-----------------------------------------------------------|
| `clock`    | `apextux.providers.clock`      | The current local time                                    |
| `coindesk` | `apextux.providers.coindesk`   | The Bitcoin price in USD, EUR or GBP, refetched every minute |
| `image`    | `apextux.providers.image`      | A still image or an animated GIF                          |
| `sysinfo`  | `apextux.providers.sysinfo`    | CPU load and frequency, memory, network rate, a temperature |
| `dummy`    | `apextux.providers.debug`      | A moving cross-hair (only with `--debug`)                 |

Importing one of these modules registers its provider with
`apextux.content.register_content_provider`. If an image cannot be read or
decoded, the `image` provider shows "Image missing" instead.

## Configuration

Settings are merged from, in order:

1. `apex-tux/settings.toml` in the user configuration directory
   (`$XDG_CONFIG_HOME` or `~/.config` on Linux,
   `~/Library/Application Support` on macOS, `%APPDATA%` on Windows);
2. `settings.toml` in the current directory;
3. environment variables starting with `APEX_`. The rest of the name is
   lower-cased and a double underscore separates nested keys, so
   `APEX_CLOCK__TWELVE_HOUR=true` sets `clock.twelve_hour`.

Missing files are skipped; later sources override earlier ones.

```toml
[interval]
refresh = 30            # seconds without a switch before moving on, 0 turns it off

[clock]
enabled = true
priority = 1
twelve_hour = false     # leave out to use the locale's format

[crypto]
currency = "EUR"        # USD/usd/dollar, EUR/eur/euro/Euro or GBP/gbp; others fall back to USD

[image]
path = "images/sample_1.gif"

[sysinfo]
polling_interval = 2000                 # milliseconds
net_interface_name = "eth0"
sensor_name = "hwmon0 CPU Temperature"  # "<chip> <label>" or just the label
net_load_max = 100.0                    # MiB/s for a full bar
cpu_frequency_max = 7.0                 # GHz for a full bar
temperature_max = 100.0                 # degrees for a full bar
```

Every provider understands `<name>.enabled` (default `true`) and
`<name>.priority` (default `99`); providers are ordered by priority,
lowest first.

## Using it as a library

```python
import asyncio

from apextux.app import run
from apextux.config import load_settings
from apextux.simulator import Simulator

settings = load_settings(["settings.toml"], {})
commands = asyncio.Queue()
asyncio.run(run(Simulator(commands, 4), settings))
```

`run` reads commands (`apextux.command.Command`) from the device's
`commands` queue when it has one. Anything that implements
`apextux.framebuffer.Device` (`draw`, `clear`, `shutdown`) can take the
simulator's place. A `FrameBuffer` holds the 5120 pixels of the screen
plus a header and a trailing byte; `FrameBuffer.to_bytes()` gives that
642-byte report.

Other building blocks:

- `apextux.providers.mediaplayer.MediaPlayerProvider` shows the track of
  any `apextux.music.Player` you supply, with a progress bar and
  scrolling title and artist.
- `apextux.notifications.NotificationBuilder` builds a `Notification`
  (icon, scrolling title, content line and countdown); a
  `NotificationProvider` registered with
  `apextux.content.register_notification_provider` feeds the scheduler.
- `apextux.text.ScrollableBuilder` and `apextux.image_renderer` render
  scrolling text and 1bpp images.

## What it does not do

- It does not talk to a keyboard: there is no USB or vendor-engine device,
  only the simulator window.
- It registers no global hotkeys; switching sources works through the
  simulator's arrow keys or the `commands` queue.
- It ships no media player backend and no desktop notification source;
  the `apextux` command shows neither unless you supply and register them
  yourself.