# digitnet

digitnet is a small fully connected neural network that learns to recognise
handwritten digits. Hidden layers use ReLU and the output layer uses softmax.
Weights start with He initialisation. Training uses mini-batches of 32,
cross-entropy loss and L2 weight decay. It stops early once the mean training
loss has not improved for 5 epochs.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

The drawing window uses `tkinter` from the standard library, so your Python
must include Tk support.

## Configuration

The network shape and hyperparameters come from a text file, `config.txt` by
default. A key must start its line:

```
neurons: 784,128,64,10
learning_rate: 0.001
regularization: 0.0005
```

If `learning_rate` or `regularization` is missing, it defaults to `0.001`. A
file with no `neurons` line is an error.

## Training and testing

```
digitnet --dataset=mnist --mode=train --epochs=50 --weights=weights.txt
```

Options take the form `--key=value`. Unknown arguments are ignored.

- `--dataset=mnist` or `--dataset=synthetic`. The default is MNIST. The
  synthetic set has 1000 training samples and 200 test samples. Each sample is
  a random binary image with noise and a random label.
- `--mode=train` or `--mode=test`. Test mode loads the weights file and does
  not train.
- `--weights=FILE` sets the weights file. The default is `weights.txt`.
- `--epochs=N` sets the maximum number of epochs. The default is 50.
- `--config=FILE` sets the configuration file. The default is `config.txt`.
- `--images=FILE` and `--labels=FILE` set the MNIST IDX files. The defaults are
  `MNIST/raw/train-images-idx3-ubyte` and `MNIST/raw/train-labels-idx1-ubyte`.

With MNIST, the same samples are used for training and for validation. Each
epoch prints the training loss and the validation accuracy and macro-averaged
precision and recall. It also writes these values as one line to
`loss_history.txt`. Each time the loss improves, the weights are saved to the
weights file. Press Ctrl-C to stop training before the next epoch starts. At
the end the command prints the class probabilities for the first five test
samples.

## Drawing digits

```
digitnet-gui [weights.txt]
```

This opens a 280×280 canvas. Draw with the left mouse button and the
probabilities for 0–9 update as you draw. Right-click or press `C` to clear the
canvas. The network shape is read from `config.txt` in the current directory.
The shape must have between 2 and 10 layers, and its input layer may have at
most 784 neurons. The canvas is averaged down to 28×28 before it is classified.

## Library use

```python
import numpy as np
from digitnet.config import read_config
from digitnet.network import Network
from digitnet.data import synthetic_dataset
from digitnet.training import train, evaluate

config = read_config("config.txt")
rng = np.random.default_rng()
net = Network(config.layer_sizes, config.learning_rate, config.regularization, rng)
data = synthetic_dataset(1000, rng)
result = train(net, data, data, 10, "weights.txt", "loss_history.txt", None)
print(result.best_epoch, result.best_loss)
print(evaluate(net, data))
```

The modules are:

- `digitnet.config`: `NetworkConfig`, `parse_config`, `read_config`.
- `digitnet.network`: `Network` (`forward`, `compute_deltas`, `gradients`,
  `update`, `save`, `load`), `Layer`, `WeightsError`, and the functions
  `relu`, `relu_derivative`, `softmax`, `cross_entropy`.
- `digitnet.data`: `Sample`, `one_hot`, `add_noise`, `generate_synthetic`,
  `synthetic_dataset`, `load_mnist_images`, `load_mnist_labels`, `load_mnist`,
  `MnistFormatError`.
- `digitnet.training`: `train`, `evaluate`, `final_evaluation`, `Metrics`,
  `TrainingResult`.
- `digitnet.cli`: `parse_args`, `Options`, `main`.
- `digitnet.gui`: `DigitApp`, `canvas_to_input`, `load_gui_network`, `main`.

Weights are saved as plain text. The file holds the layer count, the layer
sizes, the learning rate and regularization, and then the biases and weight
rows of each layer, written to six decimal places.

## Limitations

Training does not shuffle the samples. Samples after the last full batch of 32
are not trained on, but they still count in the epoch's mean loss. The package
does not download MNIST. You must supply the IDX files yourself.