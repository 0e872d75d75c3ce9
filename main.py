"""
Headless CHIP-8 host: runs a ROM frame by frame and prints the final display.

    python main.py rom=games/PONG max_cycles=20000 machine.clip_sprites=false
"""

import hydra
import jax
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, OmegaConf

from chip8vm import create_state, run_cycles, raise_for_fault, needs_input, MachineFault
from chip8vm.logging import EmulatorLogger, build_progress_bar


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    logger = EmulatorLogger(name="host", log_level=cfg.log_level)
    logger.log_session_start(OmegaConf.to_container(cfg))

    with open(to_absolute_path(cfg.rom), "rb") as f:
        rom_data = f.read()

    state = create_state(rom_data, jax.random.PRNGKey(cfg.seed), **cfg.machine)

    frames = 0
    cycles = 0
    redraws = 0
    stopped_by = "cycle budget"
    bar = build_progress_bar(cfg.max_cycles, disable=not cfg.progress)
    try:
        while cycles < cfg.max_cycles:
            budget = min(cfg.cycles_per_frame, cfg.max_cycles - cycles)
            state, executed, redraw = run_cycles(state, budget)
            executed = int(executed)
            cycles += executed
            frames += 1
            redraws += int(redraw)
            bar.update(executed)

            raise_for_fault(state)
            if bool(needs_input(state)):
                # No input device here, so a key wait ends the session.
                logger.log_key_wait(int(state.wait_register), int(state.pc))
                stopped_by = "key wait"
                break
    except MachineFault as error:
        stopped_by = type(error).__name__
    finally:
        bar.close()

    if cfg.show_display:
        logger.log_display(state.display)
    logger.log_session_end({
        "stopped_by": stopped_by,
        "cycles": cycles,
        "frames": frames,
        "redraws": redraws,
        "pc": f"0x{int(state.pc):03X}",
        "sound_playing": bool(state.sound_playing),
    })


if __name__ == "__main__":
    main()
