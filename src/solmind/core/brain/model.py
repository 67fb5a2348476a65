"""Feed-forward behavior classifier mapping wallet state to a trade direction."""

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import keras
import numpy as np

from solmind.config.settings import ModelConfig
from solmind.core.brain.decision import ActionType, TradeAction, TrainingExample
from solmind.data.models import WalletState
from solmind.utils.errors import ModelError
from solmind.utils.logging import get_logger

logger = get_logger(__name__)

# Divisors bringing each raw feature to roughly unit scale, in feature order.
FEATURE_SCALES = np.array([1000.0, 100.0, 10000.0, 1.0, 1.0, 1.0, 365.0])
INPUT_DIM = len(FEATURE_SCALES)
FLOAT32_MAX = float(np.finfo(np.float32).max)
NUM_ACTIONS = len(ActionType)


def build_network(
    hidden_units: Sequence[int] = (64, 32),
    dropout_rate: float = 0.2,
    learning_rate: float = 0.001,
) -> keras.Sequential:
    """Build and compile the classifier network.

    Args:
        hidden_units: Units in each ReLU hidden layer.
        dropout_rate: Dropout after each hidden layer (active only in training).
        learning_rate: Adam learning rate.

    Returns:
        Compiled Sequential model with a softmax over buy/sell/hold.
    """
    layers: list[Any] = [keras.Input(shape=(INPUT_DIM,))]
    for units in hidden_units:
        layers.append(keras.layers.Dense(units, activation="relu"))
        layers.append(keras.layers.Dropout(dropout_rate))
    layers.append(keras.layers.Dense(NUM_ACTIONS, activation="softmax"))

    network = keras.Sequential(layers, name="wallet_behavior")
    network.compile(
        optimizer=keras.optimizers.Adam(learning_rate=learning_rate),
        loss="categorical_crossentropy",
        metrics=["accuracy"],
    )
    return network


class TrainingProgressCallback(keras.callbacks.Callback):
    """Reports completed epochs back to the owning BehaviorModel."""

    def __init__(self, owner: "BehaviorModel", epochs: int) -> None:
        super().__init__()
        self._owner = owner
        self._epochs = epochs

    def on_epoch_end(self, epoch: int, logs: dict[str, Any] | None = None) -> None:
        self._owner._progress = max(self._owner._progress, (epoch + 1) / self._epochs)
        logger.debug(
            "Epoch {}/{} loss={}",
            epoch + 1,
            self._epochs,
            (logs or {}).get("loss"),
        )


class BehaviorModel:
    """Classifier deciding trade direction from a wallet's behavior.

    The model only decides direction; token and amount are fixed defaults
    and sizing is bounded later by the trade parameters.

    Inference reads an immutable serving snapshot while training fits a
    separate network and publishes a new snapshot when it completes, so a
    prediction never observes weights mid-update. Training runs are
    serialized by a lock.
    """

    def __init__(
        self,
        config: ModelConfig | None = None,
        network: keras.Model | None = None,
    ) -> None:
        """Initialize the behavior model.

        Args:
            config: Model settings; defaults are used when omitted.
            network: Pre-built network; one is built from config when omitted.
        """
        self.config = config or ModelConfig()
        self._network = network or build_network(
            hidden_units=self.config.hidden_units,
            dropout_rate=self.config.dropout_rate,
            learning_rate=self.config.learning_rate,
        )
        self._serving = self._snapshot(self._network)
        self._progress = 0.0
        self._training = False
        self._train_lock = asyncio.Lock()

    @staticmethod
    def _snapshot(network: keras.Model) -> keras.Model:
        snapshot = keras.models.clone_model(network)
        snapshot.set_weights(network.get_weights())
        return snapshot

    @property
    def is_training(self) -> bool:
        """Check whether a training run is in progress."""
        return self._training

    def get_training_progress(self) -> float:
        """Fraction of epochs completed in the latest training run."""
        return self._progress

    def normalize(self, state: WalletState) -> np.ndarray:
        """Scale a wallet state into the 7-feature model input.

        Features beyond the float32 range saturate at its maximum.

        Raises:
            ModelError: If any feature is not finite.
        """
        raw = np.array(
            [
                state.transaction_count,
                state.unique_tokens,
                state.avg_transaction_value,
                state.trade_frequency,
                state.profit_ratio,
                state.risk_level,
                state.time_in_market,
            ],
            dtype=np.float64,
        )
        features = raw / FEATURE_SCALES
        if not np.all(np.isfinite(features)):
            raise ModelError(f"Wallet state produced non-finite features: {features}")
        return np.minimum(features, FLOAT32_MAX).astype(np.float32)

    def predict_proba(self, state: WalletState) -> np.ndarray:
        """Class probabilities for buy, sell and hold.

        Raises:
            ModelError: If the network output is not finite.
        """
        inputs = self.normalize(state)[np.newaxis, :]
        outputs = self._serving(inputs, training=False)
        probabilities = np.asarray(keras.ops.convert_to_numpy(outputs)[0], dtype=np.float64)
        if not np.all(np.isfinite(probabilities)):
            raise ModelError(f"Network produced non-finite probabilities: {probabilities}")
        probabilities = np.clip(probabilities, 0.0, 1.0)
        return probabilities / probabilities.sum()

    async def predict(self, state: WalletState) -> TradeAction:
        """Predict the next trade action for a wallet.

        Args:
            state: Current wallet state.

        Returns:
            TradeAction whose confidence is the winning class probability.
        """
        probabilities = await asyncio.to_thread(self.predict_proba, state)
        index = int(np.argmax(probabilities))
        action = TradeAction(
            type=ActionType.from_index(index),
            token=self.config.default_token,
            amount=self.config.default_amount,
            confidence=float(probabilities[index]),
        )
        logger.debug(
            "Prediction: {} confidence={:.3f} probabilities={}",
            action.type.value,
            action.confidence,
            probabilities.round(4).tolist(),
        )
        return action

    async def train(self, examples: Sequence[TrainingExample]) -> None:
        """Fit the classifier on labeled examples.

        Does nothing when ``examples`` is empty.
        """
        if not examples:
            return

        inputs = np.stack([self.normalize(example.state) for example in examples])
        targets = self._one_hot(examples)
        await self._fit(inputs, targets)

    async def batch_train(self, examples: Sequence[TrainingExample]) -> None:
        """Fit the classifier weighting each example by its reward.

        Negative rewards are clamped to zero and zero-weight examples are
        dropped; does nothing when no example remains.
        """
        weighted = [example for example in examples if example.reward > 0]
        if not weighted:
            return

        inputs = np.stack([self.normalize(example.state) for example in weighted])
        targets = self._one_hot(weighted)
        weights = np.array([example.reward for example in weighted], dtype=np.float32)
        await self._fit(inputs, targets, sample_weight=weights)

    @staticmethod
    def _one_hot(examples: Sequence[TrainingExample]) -> np.ndarray:
        indices = [example.action.type.index for example in examples]
        return np.eye(NUM_ACTIONS, dtype=np.float32)[indices]

    async def _fit(
        self,
        inputs: np.ndarray,
        targets: np.ndarray,
        sample_weight: np.ndarray | None = None,
    ) -> None:
        async with self._train_lock:
            self._training = True
            self._progress = 0.0
            epochs = self.config.epochs
            logger.info("Training behavior model: examples={} epochs={}", len(inputs), epochs)
            try:
                await asyncio.to_thread(
                    self._network.fit,
                    inputs,
                    targets,
                    sample_weight=sample_weight,
                    epochs=epochs,
                    batch_size=self.config.batch_size,
                    shuffle=True,
                    verbose=0,
                    callbacks=[TrainingProgressCallback(self, epochs)],
                )
            except Exception:
                # Drop partially fitted weights; only published weights persist.
                self._network.set_weights(self._serving.get_weights())
                logger.warning("Behavior model training failed at progress {:.2f}", self._progress)
                raise
            else:
                self._serving = self._snapshot(self._network)
                self._progress = 1.0
                logger.info("Behavior model training complete")
            finally:
                self._training = False

    async def save(self, path: str | Path) -> None:
        """Save the network in Keras format (``.keras`` file)."""
        async with self._train_lock:
            await asyncio.to_thread(self._network.save, str(path))
        logger.info("Behavior model saved to {}", path)

    async def load(self, path: str | Path) -> None:
        """Load a previously saved network.

        Raises:
            ModelError: If the file cannot be loaded or has the wrong shape.
        """
        try:
            loaded = await asyncio.to_thread(keras.models.load_model, str(path))
        except (OSError, ValueError) as e:
            raise ModelError(f"Failed to load model from {path}: {e}") from e

        if (
            tuple(loaded.input_shape) != (None, INPUT_DIM)
            or tuple(loaded.output_shape) != (None, NUM_ACTIONS)
        ):
            raise ModelError("Invalid model format")

        loaded.compile(
            optimizer=keras.optimizers.Adam(learning_rate=self.config.learning_rate),
            loss="categorical_crossentropy",
            metrics=["accuracy"],
        )
        async with self._train_lock:
            self._network = loaded
            self._serving = self._snapshot(loaded)
        logger.info("Behavior model loaded from {}", path)
