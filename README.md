# hammodem

Baseband signal-processing building blocks for an amateur radio
packet and digital-voice modem. Everything works on blocks of signed
16-bit (Q15) audio samples at a 24 kHz sample rate, in pure Python with
no dependencies.

## Modules

- `hammodem.constants`: frame, sync and timing constants for AX.25,
  DMR and NXDN, and `VERSION`.
- `hammodem.dsp`: streaming FIR filters `FirFilterQ15` (32-bit
  accumulator, saturating Q15 output), `FirFilterF32` and the polyphase
  `FirInterpolatorQ15`, each with `process(samples)` and `reset()`; bit
  helpers `count_bits`, `read_bit_msb`, `write_bit_msb` and `read_bit_lsb`.
- `hammodem.ax25frame`: `AX25Frame`, a frame buffer of at most 300 bytes
  with the HDLC CCITT frame check sequence. `append` raises
  `OverflowError` when the frame is full; `add_crc` appends the FCS low
  byte first and stores it in `fcs`; `check_crc` checks the trailing two
  bytes and stores the FCS on success.
- `hammodem.ax25twist`: `AX25Twist`, a 9-tap filter that tilts the
  balance between the 1200 Hz and 2200 Hz tones. Settings run from -6 to
  +12 (`twist_coefficients` raises `ValueError` outside that range);
  `set_twist` keeps the filter history.
- `hammodem.ax25demod`: `AX25Demodulator`, a 1200 baud AFSK demodulator
  with a delay-line discriminator, a clock-recovery PLL, NRZI decoding and
  HDLC deframing. `process(samples)` returns the first checked frame
  completed in the block, or `None`; `is_dcd()` reports carrier detect
  with hysteresis on the PLL jitter.
- `hammodem.ax25rx`: `AX25RX`, a 1100–2300 Hz band-pass filter feeding
  three demodulators with twists 3, 6 and 9. `samples(samples)` returns
  the payloads received (without FCS), dropping a frame whose FCS equals
  the previous one within two blocks. At each slot boundary it runs
  p-persistent channel access; `can_tx()` gives the result and
  `set_params(twist, slot_time, p_persist)` sets the centre twist, the
  slot time in 10 ms units and the persistence value.
- `hammodem.ax25tx`: `AX25TX`, which frames data with its FCS, adds a
  preamble and flags, bit-stuffs, NRZI-encodes and synthesises AFSK
  audio. `set_tx_delay` sets the preamble in 10 ms units; `space()` is
  255 when a new frame may be queued and 0 while one is being sent. In
  simplex mode it waits for its `can_tx` callable before starting a frame.
- `hammodem.cwid`: `CWIdTX`, a Morse code identifier. `write` accepts a
  string or bytes, skips characters without a Morse code and raises
  `ValueError` for an empty or over-long message.
- `hammodem.dmr_dmo_tx`: `DMRDMOTX`, a DMR direct-mode four-level FSK
  transmitter with a root-raised-cosine shaping filter. It sends a sync
  preamble while its `tx_active` callable is false, then each queued
  burst followed by a fill pattern. `write_data` takes a control byte plus
  a 33-byte frame and raises `ValueError` or `OverflowError`.
- `hammodem.calibration`: `CalRSSI` (reports big-endian max, min and
  average every 24000 readings), `CalNXDN` (the NXDN 1031 Hz test
  pattern), `CalPOCSAG` (an alternating `0xAA` bit pattern) and `CalFM`
  (a test tone chosen by an `FMCalState` mode). Each switch is turned on
  by `write([1])`; any other single byte turns it off and any other length
  raises `ValueError`.

## Sample sinks

The transmitters do not drive any audio hardware. They write to a sink
object with a `space` property (free room in samples) and a
`write(samples)` method:

```python
from hammodem.ax25tx import AX25TX


class Collector:
    def __init__(self):
        self.samples = []

    @property
    def space(self):
        return 4800

    def write(self, samples):
        self.samples.extend(samples)


sink = Collector()
tx = AX25TX(sink)
tx.write_data(b"payload bytes of a packet")
while tx.pending:
    tx.process()
print(len(sink.samples))
```

Checking a frame on its own:

```python
from hammodem.ax25frame import AX25Frame

frame = AX25Frame(b"payload bytes of a packet")
frame.add_crc()
assert frame.check_crc()
```

## What it does not do

- There is no command-line program, no host serial protocol and no
  audio or radio I/O; the caller moves samples in and out.
- There are no DMR, NXDN, D-Star, YSF, P25, M17 or POCSAG receivers and
  no NXDN or POCSAG transmitters. `CalNXDN` needs an object with
  `process()`, `space()` and `write_data(data)`, and `CalPOCSAG` needs a
  callable that sends one byte; both must be supplied by the caller.

## Tests

```
pip install -e ".[test]"
pytest
```