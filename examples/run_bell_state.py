"""Example: Bell state on tiny-qsim, ideal and with trajectory noise."""
import sys
sys.path.insert(0, 'src')

from tiny_qsim import (
    BitFlip, Circuit, Depolarizing, NoiseModel, TrajectorySimulator, show_counts, show_state,
)

print("=" * 50)
print("tiny-qsim: Bell State Example")
print("=" * 50)

qc = Circuit(2, seed=7).h(0).cx(0, 1)
print()
print(qc.draw())
print()
print(show_state(qc.state))

noise = (
    NoiseModel()
    .add_all_qubit_error(Depolarizing(0.02))
    .add_gate_error("cx", BitFlip(0.05))
    .add_readout_error(0.01)
)
result = TrajectorySimulator(noise, seed=7).run(qc, trajectories=1000)

print()
print(noise)
print(show_counts(result.counts))
print("\nExpected: mostly |00⟩ and |11⟩, with a few noisy |01⟩ and |10⟩")
